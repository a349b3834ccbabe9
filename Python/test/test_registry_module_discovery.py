import importlib


def test_list_modules_returns_stable_sorted_records():
    # Arrange
    registry = importlib.import_module("TBS.registry")

    # Act
    modules = registry.list_modules(include_submodules=True)

    # Assert
    assert modules, "Expected non-empty module inventory"
    assert [m["name"] for m in modules] == sorted(m["name"] for m in modules)
    for entry in modules:
        assert set(entry) == {"name", "path", "description"}
        assert entry["path"].startswith("TBS.")
    assert "Algebra.Properties" in {m["name"] for m in modules}


def test_list_modules_without_submodules():
    registry = importlib.import_module("TBS.registry")
    names = {m["name"] for m in registry.list_modules(include_submodules=False)}
    assert names == {"Algebra", "Solver", "PropertyExtractor", "common"}


def test_describe_module_curated_and_unknown_paths():
    # Arrange
    registry = importlib.import_module("TBS.registry")

    # Act
    extractor_desc = registry.describe_module("PropertyExtractor")
    unknown_desc = registry.describe_module("does.not.exist")

    # Assert
    assert isinstance(extractor_desc, str)
    assert extractor_desc.strip() != ""
    assert unknown_desc == "No description available."


def test_package_lazy_exports():
    tbs = importlib.import_module("TBS")
    from TBS.Algebra.model import Model
    from TBS.PropertyExtractor.diagonalizer import DiagonalizerExtractor

    assert tbs.Model is Model
    assert tbs.DiagonalizerExtractor is DiagonalizerExtractor
    assert tbs.list_modules is tbs.registry.list_modules
