"""Unit tests for hook chains."""

import pytest

from block_parser import FieldHookMeta, HookRegistry, ParsedBlock, RawBlock
from block_parser.hooks import HookChain


class TestHookChain:
    """Ordering, chaining and removal."""

    def test_empty_chain_returns_value(self):
        assert HookChain("test").apply("value") == "value"

    def test_handlers_chain_in_registration_order(self):
        chain = HookChain("test")
        chain.add(lambda value: value + "a")
        chain.add(lambda value: value + "b")

        assert chain.apply("") == "ab"

    def test_lower_priority_runs_first(self):
        chain = HookChain("test")
        chain.add(lambda value: value + "late", priority=20)
        chain.add(lambda value: value + "default")
        chain.add(lambda value: value + "early", priority=5)

        assert chain.apply("") == "earlydefaultlate"

    def test_extra_arguments_passed(self):
        chain = HookChain("test")
        chain.add(lambda value, a, b: value + a + b)

        assert chain.apply(1, 2, 3) == 6

    def test_add_returns_callback(self):
        chain = HookChain("test")

        def handler(value):
            return value

        assert chain.add(handler) is handler

    def test_unknown_modifier_rejected(self):
        chain = HookChain("test", frozenset({"name"}))

        with pytest.raises(ValueError, match="Unknown modifier"):
            chain.add(lambda value: value, colour="red")

    def test_remove(self):
        chain = HookChain("test")

        def handler(value):
            return value * 2

        chain.add(handler)
        chain.add(handler, priority=1)

        assert len(chain) == 2
        assert chain.remove(handler) is True
        assert len(chain) == 0
        assert chain.remove(handler) is False

    def test_clear(self):
        chain = HookChain("test")
        chain.add(lambda value: value)
        chain.clear()

        assert len(chain) == 0


class TestHookRegistry:
    """Scoped hook points on the registry."""

    @pytest.fixture
    def paragraph(self):
        return ParsedBlock(name="core/paragraph", type="generic", attrs={})

    def test_block_hook_scoped_by_name(self, paragraph):
        hooks = HookRegistry()
        seen = []
        hooks.block.add(lambda block, raw, content_id: seen.append("any") or block)
        hooks.block.add(lambda block, raw, content_id: seen.append("para") or block, name="core/paragraph")
        hooks.block.add(lambda block, raw, content_id: seen.append("heading") or block, name="core/heading")

        hooks.apply_block(paragraph, RawBlock(name="core/paragraph"), 1)

        assert seen == ["any", "para"]

    def test_block_hook_scoped_by_type(self, paragraph):
        hooks = HookRegistry()
        hooks.block.add(lambda block, raw, content_id: "schema", type="schemaField")
        hooks.block.add(lambda block, raw, content_id: "generic", type="generic")

        assert hooks.apply_block(paragraph, RawBlock(name="core/paragraph"), 1) == "generic"

    def test_modifier_subject_fixed_before_handlers_run(self, paragraph):
        """Scoping uses the block as it entered the chain."""
        hooks = HookRegistry()
        renamed = ParsedBlock(name="core/heading", type="generic")
        hooks.block.add(lambda block, raw, content_id: renamed)
        hooks.block.add(lambda block, raw, content_id: "paragraph-handler", name="core/paragraph")

        assert hooks.apply_block(paragraph, RawBlock(name="core/paragraph"), 1) == "paragraph-handler"

    def test_field_hook_scoped_by_meta(self):
        hooks = HookRegistry()
        hooks.field.add(lambda value, descriptor, meta: value + "!", block_name="acf/hero")
        hooks.field.add(lambda value, descriptor, meta: value + "?", type="image")
        meta = FieldHookMeta(type="text", name="title", block_name="acf/hero")

        assert hooks.apply_field("Hi", None, meta) == "Hi!"

    def test_field_hook_modifiers(self):
        hooks = HookRegistry()

        with pytest.raises(ValueError):
            hooks.field.add(lambda value, descriptor, meta: value, content="x")

    def test_include_rendered_scoped_by_block(self, paragraph):
        hooks = HookRegistry()
        hooks.include_rendered.add(lambda include, block: False, name="core/paragraph")

        assert hooks.apply_include_rendered(True, paragraph) is False
        assert hooks.apply_include_rendered(True, ParsedBlock(name="core/image", type="generic")) is True

    def test_include_rendered_coerced_to_bool(self, paragraph):
        hooks = HookRegistry()
        hooks.include_rendered.add(lambda include, block: None)

        assert hooks.apply_include_rendered(True, paragraph) is False
