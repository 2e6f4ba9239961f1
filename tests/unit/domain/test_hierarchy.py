"""Unit tests for HierarchyClassifier and ModuleNaming."""

from pathlib import Path

import pytest

from module_steward.domain.entities import HierarchyRole, LayerSuffix
from module_steward.domain.hierarchy import HierarchyClassifier, ModuleNaming
from module_steward.infrastructure.gateways.filesystem_gateway import FileSystemGateway
from module_steward.infrastructure.gateways.pom_descriptor_gateway import PomDescriptorGateway
from tests.pom_builders import build_billing_tree, build_payments_tree, pom, write_module


@pytest.fixture
def classifier() -> HierarchyClassifier:
    return HierarchyClassifier(PomDescriptorGateway(), FileSystemGateway())


class TestClassify:
    def test_leaf_suffix_without_children_is_leaf(self, classifier: HierarchyClassifier, tmp_path: Path) -> None:
        """A leaf-suffixed module with no <modules> is a leaf."""
        assert classifier.classify(pom("payments-api"), tmp_path) is HierarchyRole.LEAF

    def test_module_with_leaf_children_is_parent_aggregator(
        self, classifier: HierarchyClassifier, tmp_path: Path
    ) -> None:
        paths = build_payments_tree(tmp_path)
        content = paths["payments-parent"].read_text()
        assert classifier.classify(content, tmp_path) is HierarchyRole.PARENT_AGGREGATOR

    def test_module_with_only_aggregator_children_is_pure(
        self, classifier: HierarchyClassifier, tmp_path: Path
    ) -> None:
        paths = build_billing_tree(tmp_path)
        assert classifier.classify(paths["billing"].read_text(), tmp_path) is HierarchyRole.PURE_AGGREGATOR

    def test_missing_identity_is_unknown(self, classifier: HierarchyClassifier, tmp_path: Path) -> None:
        assert classifier.classify("<project></project>", tmp_path) is HierarchyRole.UNKNOWN

    def test_ambiguous_directory_uses_child_identity(
        self, classifier: HierarchyClassifier, tmp_path: Path
    ) -> None:
        """A child directory without a leaf suffix is resolved through its own artifactId."""
        write_module(tmp_path, "impl", "orders-core", parent="orders")
        content = pom("orders", modules=["impl"])
        assert classifier.classify(content, tmp_path) is HierarchyRole.PARENT_AGGREGATOR

    def test_classification_ignores_ancestors(self, classifier: HierarchyClassifier, tmp_path: Path) -> None:
        """The same content classifies identically whatever its declared parent is."""
        write_module(tmp_path, "a/shipping-api", "shipping-api")
        write_module(tmp_path, "b/shipping-api", "shipping-api")
        under_pure = pom("shipping", parent="platform-aggregator", modules=["shipping-api"])
        under_parent = pom("shipping", parent="legacy-parent", modules=["shipping-api"])
        assert classifier.classify(under_pure, tmp_path / "a") is classifier.classify(under_parent, tmp_path / "b")
        assert classifier.classify(under_pure, tmp_path / "a") is classifier.classify(under_pure, tmp_path / "a")


class TestChildResolution:
    def test_leaf_children_keep_declared_order(self, classifier: HierarchyClassifier, tmp_path: Path) -> None:
        write_module(tmp_path, "x-core", "x-core")
        write_module(tmp_path, "x-sub", "x-sub-aggregator", modules=["y-api"])
        content = pom("x", modules=["x-core", "x-sub", "x-api"])
        assert classifier.leaf_children(content, tmp_path) == ["x-core", "x-api"]

    def test_unreadable_child_role_falls_back_to_name(
        self, classifier: HierarchyClassifier, tmp_path: Path
    ) -> None:
        assert classifier.resolve_child_role(tmp_path, "ghost-api") is HierarchyRole.LEAF
        assert classifier.resolve_child_role(tmp_path, "ghost") is HierarchyRole.UNKNOWN

    def test_read_node(self, classifier: HierarchyClassifier, tmp_path: Path) -> None:
        """read_node fills identity, parent, layer, children and role."""
        paths = build_payments_tree(tmp_path)
        node = classifier.read_node(paths["payments-api"])
        assert node is not None
        assert node.identity == "payments-api"
        assert node.parent is not None and node.parent.identity == "payments-parent"
        assert node.layer is LayerSuffix.API
        assert node.role is HierarchyRole.LEAF
        assert not node.has_children

    def test_read_node_missing_file(self, classifier: HierarchyClassifier, tmp_path: Path) -> None:
        assert classifier.read_node(tmp_path / "pom.xml") is None

    def test_custom_leaf_suffixes(self, tmp_path: Path) -> None:
        """Configured suffixes replace the defaults."""
        custom = HierarchyClassifier(PomDescriptorGateway(), FileSystemGateway(), leaf_suffixes=("-impl",))
        assert custom.is_leaf_identity("orders-impl")
        assert not custom.is_leaf_identity("orders-api")


class TestModuleNaming:
    @pytest.mark.parametrize(
        ("identity", "expected"),
        [("billing", "billing"), ("billing-parent", "billing"), ("billing-aggregator", "billing"), ("-parent", "-parent")],
    )
    def test_base_name(self, identity: str, expected: str) -> None:
        assert ModuleNaming.base_name(identity) == expected

    def test_role_names(self) -> None:
        """Switching role replaces the role suffix instead of stacking it."""
        assert ModuleNaming.aggregator_name("billing-parent") == "billing-aggregator"
        assert ModuleNaming.parent_name("billing-aggregator") == "billing-parent"
        assert ModuleNaming.name_for_role("billing", HierarchyRole.PURE_AGGREGATOR) == "billing-aggregator"
        assert ModuleNaming.name_for_role("billing-api", HierarchyRole.LEAF) is None
