import pytest

from stylemerge.errors import CircularImportError, StyleMergeError
from stylemerge.models import FileRecord
from stylemerge.services.assemble_service import (
    AssembleOptions,
    StalenessTracker,
    assemble,
    reindent,
)
from stylemerge.syntax import Syntax


def _files(*records):
    return {record.path: record for record in records}


def test_assemble_inlines_import_in_place():
    root = FileRecord("/p/a.scss", '@import "/p/b.scss";.x{color:red}', 1)
    files = _files(root, FileRecord("/p/b.scss", ".y{color:blue}", 1))

    assert assemble(Syntax.NESTED, root, files, 1) == ".y{color:blue}.x{color:red}"
    assert root.final(Syntax.NESTED) == ".y{color:blue}.x{color:red}"


def test_assemble_keeps_plain_css_imports_as_is():
    root = FileRecord("/p/a.scss", '@import "/p/reset.css";.x{}', 1)
    files = _files(root, FileRecord("/p/reset.css", '@import "other.css";a{}', 1))

    assert assemble(Syntax.NESTED, root, files, 1) == '@import "other.css";a{}.x{}'


def test_assemble_detects_cycles():
    a = FileRecord("/p/a.scss", '@import "/p/b.scss";', 1)
    b = FileRecord("/p/b.scss", '@import "/p/a.scss";', 1)

    with pytest.raises(CircularImportError) as excinfo:
        assemble(Syntax.NESTED, a, _files(a, b), 1)

    assert set(excinfo.value.chain) == {"/p/a.scss", "/p/b.scss"}
    assert "/p/a.scss" in str(excinfo.value)
    assert "/p/b.scss" in str(excinfo.value)


def test_staleness_check_detects_cycles_between_built_records():
    a = FileRecord("/p/a.scss", '@import "/p/b.scss";', 1)
    b = FileRecord("/p/b.scss", '@import "/p/a.scss";', 1)
    a.set_final(Syntax.NESTED, "", 1)
    b.set_final(Syntax.NESTED, "", 1)

    with pytest.raises(CircularImportError):
        StalenessTracker(Syntax.NESTED, _files(a, b)).needs_rebuild(a)


def test_assemble_fails_for_dependency_outside_graph():
    root = FileRecord("/p/a.scss", '@import "/p/missing.scss";', 1)

    with pytest.raises(StyleMergeError):
        assemble(Syntax.NESTED, root, _files(root), 1)


def test_changed_leaf_rebuilds_only_its_importers():
    root = FileRecord("/p/a.scss", '@import "/p/b.scss";@import "/p/c.scss";', 1)
    b = FileRecord("/p/b.scss", ".b{}", 1)
    c = FileRecord("/p/c.scss", ".c{}", 1)
    assert assemble(Syntax.NESTED, root, _files(root, b, c), 1) == ".b{}.c{}"

    changed = FileRecord("/p/c.scss", ".c{color:red}", 2)
    result = assemble(Syntax.NESTED, root, _files(root, b, changed), 2)

    assert result == ".b{}.c{color:red}"
    assert root.last_updated == 2
    assert changed.last_updated == 2
    assert b.last_updated == 1
    assert b.final(Syntax.NESTED) == ".b{}"


def test_unchanged_graph_reuses_cached_output():
    root = FileRecord("/p/a.scss", '@import "/p/b.scss";.x{}', 1)
    files = _files(root, FileRecord("/p/b.scss", ".b{}", 1))
    first = assemble(Syntax.NESTED, root, files, 1)

    second = assemble(Syntax.NESTED, root, files, 2)

    assert second == first
    assert root.last_updated == 1


def test_reindent_prefixes_following_lines():
    assert reindent("a\n  b\n", "  ") == "a\n    b"
    assert reindent("a\n", "") == "a\n"


def test_assemble_indented_import_is_reindented():
    root = FileRecord("/p/a.sass", '.x\n  @import "/p/b.sass"\n', 1)
    b = FileRecord("/p/b.sass", "color: blue\nmargin: 0\n", 1)

    result = assemble(Syntax.INDENTED, root, _files(root, b), 1)

    assert result == ".x\n  color: blue\n  margin: 0\n"


def test_optimizations_remove_duplicates_across_files():
    mixin = "@mixin m{a:b}"
    root = FileRecord("/p/a.scss", '@import "/p/b.scss";@import "/p/c.scss";', 1)
    b = FileRecord("/p/b.scss", mixin + "$x: 1 !default;", 1)
    c = FileRecord("/p/c.scss", mixin + "$x: 2 !default;.c{@include m}", 1)
    options = AssembleOptions(
        optimize_redundant_variables=True,
        optimize_redundant_functions_and_mixins=True,
    )

    result = assemble(Syntax.NESTED, root, _files(root, b, c), 1, options=options)

    assert result == mixin + "$x: 1 !default;.c{@include m}"
