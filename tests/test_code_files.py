import copy

import pytest

from suppscout.code_files import DEFAULT_CODE_EXTENSIONS, CodeFileIdentifier
from suppscout.models import SupplementaryBundle, SupplementaryFile


def _bundle(*names: str) -> SupplementaryBundle:
    return SupplementaryBundle(
        article_id="a1",
        article_title="Article a1",
        files=[
            SupplementaryFile(name=name, local_path=f"/tmp/a1/{name}", size_bytes=100)
            for name in names
        ],
        temp_dir="/tmp/a1",
    )


def test_identify_code_files_scenario() -> None:
    identifier = CodeFileIdentifier([".py", ".r", ".ipynb"])
    bundle = _bundle("analysis.py", "data.csv", "notebook.ipynb", "figure.png", "model.r")

    names = [f.name for f in identifier.identify_code_files(bundle)]

    assert names == ["analysis.py", "notebook.ipynb", "model.r"]


@pytest.mark.parametrize("filename", [
    "Makefile",      # no dot
    ".gitignore",    # dotfile
    ".py",           # dot at position 0
    "script.",       # trailing dot
    "archive.tar.gz",
    "README.md",
])
def test_not_code_files(filename: str) -> None:
    assert CodeFileIdentifier().is_code_file(filename) is False


@pytest.mark.parametrize("filename", [
    "main.py",
    "MODEL.R",
    "Analysis.Rmd",
    "solver.F90",
    "pipeline.tar.sh",
    "Notebook.IPYNB",
])
def test_code_files_case_insensitive(filename: str) -> None:
    assert CodeFileIdentifier().is_code_file(filename) is True


def test_default_extensions_cover_common_languages() -> None:
    identifier = CodeFileIdentifier()

    assert len(DEFAULT_CODE_EXTENSIONS) == 24
    assert identifier.extensions == frozenset(DEFAULT_CODE_EXTENSIONS)
    for ext in (".py", ".jl", ".cpp", ".cs", ".kt", ".rs", ".sql", ".ipynb"):
        assert ext in identifier.extensions


def test_configured_extensions_are_lower_cased() -> None:
    identifier = CodeFileIdentifier([".PY", ".Jl"])

    assert identifier.extensions == frozenset({".py", ".jl"})
    assert identifier.is_code_file("run.jl") is True


def test_set_extensions_replaces_wholesale() -> None:
    identifier = CodeFileIdentifier([".py"])

    identifier.set_extensions([".csv"])

    assert identifier.is_code_file("main.py") is False
    assert identifier.is_code_file("table.CSV") is True


def test_identify_code_files_does_not_mutate_bundle() -> None:
    bundle = _bundle("a.py", "b.txt", "c.r")
    before = copy.deepcopy(bundle)
    files_ref = bundle.files

    result = CodeFileIdentifier().identify_code_files(bundle)
    result.clear()

    assert bundle == before
    assert bundle.files is files_ref


def test_empty_bundle_yields_no_code_files() -> None:
    assert CodeFileIdentifier().identify_code_files(_bundle()) == []
