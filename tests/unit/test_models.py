from stylemerge.models import FileRecord, next_build_marker
from stylemerge.syntax import Syntax


def test_record_starts_with_native_original():
    record = FileRecord("/p/a.scss", ".x{}", 4)

    assert record.native_syntax is Syntax.NESTED
    assert record.original() == ".x{}"
    assert record.final() is None
    assert record.has_original(Syntax.INDENTED) is False
    assert record.last_updated == 4


def test_plain_css_is_final_in_nested_slot():
    record = FileRecord("/p/reset.css", "a{b:c}", 1)

    assert record.original(Syntax.NESTED) == "a{b:c}"
    assert record.final(Syntax.NESTED) == "a{b:c}"
    assert record.final(Syntax.PLAIN) == "a{b:c}"
    assert record.imports(Syntax.NESTED) == []


def test_set_original_invalidates_final():
    record = FileRecord("/p/a.scss", ".x{}", 1)
    record.set_final(Syntax.NESTED, ".x{}", 2)
    assert record.has_final(Syntax.NESTED)

    record.set_original(Syntax.NESTED, ".y{}", 3)

    assert record.final(Syntax.NESTED) is None
    assert record.last_updated == 3


def test_imports_are_parsed_lazily_and_cached():
    record = FileRecord("/p/a.scss", '@import "/p/b.scss";.x{}', 1)

    imports = record.imports()

    assert [ref.target_path for ref in imports] == ["/p/b.scss"]
    assert record.imports() is imports
    assert record.imports(Syntax.INDENTED) == []


def test_build_markers_increase():
    first = next_build_marker()
    second = next_build_marker()

    assert second > first


def test_plain_css_imports_stay_empty_after_conversion():
    record = FileRecord("/p/b.css", '@import "c.css";\n.b{color:blue}', 1)

    record.set_original(Syntax.INDENTED, '@import "c.css"\n.b{color:blue}', 2)

    assert record.imports(Syntax.INDENTED) == []
    assert record.imports() == []
