import os
import sys

import pytest

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from docgen.adapters.java_adapter import JavaAdapter

SAMPLE = """\
package com.example.app;

import java.util.List;
import java.util.*;
import static java.lang.Math.max;

/**
 * Manages users.
 *
 * @author someone
 */
public class UserService extends BaseService implements Closeable, Runnable {
    private int a, b;
    private final Map<String, Integer> counts = new HashMap<String, Integer>();
    public static final int LIMIT = 10, OTHER = max(1, 2);

    /**
     * Creates the service.
     * @param name the service name
     */
    public UserService(String name) {
        super();
    }

    /**
     * Finds a user.
     * @param id the user id
     * @param missing not a parameter
     * @return the user, if any
     * @return ignored second
     */
    public List<String> find(final Long id, String... tags) throws NotFoundException, IllegalStateException {
        return null;
    }

    @Override
    public void run() {
    }

    static class Inner {
        class Deep {
        }
    }

    enum Color {
        RED, GREEN;

        int code() { return 1; }
    }
}
"""


def analyze(code=SAMPLE):
    return JavaAdapter().analyze_source(code, "src/UserService.java")


def get_type(source, name):
    for top in source.types:
        for t in top.walk():
            if t.name == name:
                return t
    raise KeyError(name)


def test_package_and_imports():
    source = analyze()
    assert source.parsed
    assert source.parse_error is None
    assert source.package_name == "com.example.app"
    assert source.imports == ["java.util.List", "java.util.*", "static java.lang.Math.max"]


def test_top_level_class():
    source = analyze()
    assert [t.name for t in source.types] == ["UserService"]

    cls = source.types[0]
    assert cls.qualified_name == "com.example.app.UserService"
    assert cls.kind == "class"
    assert cls.modifiers == ("public",)
    assert cls.super_class == "BaseService"
    assert cls.interfaces == ("Closeable", "Runnable")
    assert cls.javadoc == "Manages users."
    assert cls.start_line == 12
    assert cls.end_line == 50
    assert cls.signature == "public class UserService extends BaseService implements Closeable, Runnable"


def test_multi_variable_fields_share_type_and_modifiers():
    cls = analyze().types[0]
    fields = {f.name: f for f in cls.fields}
    assert [f.name for f in cls.fields] == ["a", "b", "counts", "LIMIT", "OTHER"]

    assert fields["a"].type_name == fields["b"].type_name == "int"
    assert fields["a"].modifiers == fields["b"].modifiers == ("private",)
    assert fields["a"].initial_value is None
    assert fields["b"].initial_value is None
    assert fields["a"].line == 13

    assert fields["counts"].type_name == "Map<String, Integer>"
    assert fields["counts"].modifiers == ("private", "final")
    assert fields["counts"].initial_value == "new HashMap<String, Integer>()"

    assert fields["LIMIT"].modifiers == ("public", "static", "final")
    assert fields["LIMIT"].initial_value == "10"
    assert fields["OTHER"].initial_value == "max(1, 2)"


def test_each_declarator_carries_its_own_line():
    code = "\n".join([
        "class A {",           # 1
        "  int a = 1,",        # 2
        "      b = 2;",        # 3
        "  String c, d;",      # 4
        "}",                   # 5
    ])
    fields = {f.name: f for f in analyze(code).types[0].fields}
    assert (fields["a"].line, fields["b"].line) == (2, 3)
    assert (fields["b"].initial_value, fields["c"].line, fields["d"].line) == ("2", 4, 4)


def test_constructor_and_methods():
    cls = analyze().types[0]
    assert [m.name for m in cls.methods] == ["UserService", "find", "run"]

    ctor = cls.constructors[0]
    assert ctor.is_constructor
    assert ctor.return_type is None
    assert ctor.javadoc == "Creates the service."
    assert ctor.parameters[0].description == "the service name"
    assert ctor.return_description is None
    assert (ctor.start_line, ctor.end_line) == (21, 23)

    find = cls.methods[1]
    assert find.return_type == "List<String>"
    assert find.javadoc == "Finds a user."
    assert find.thrown_exceptions == ("NotFoundException", "IllegalStateException")
    assert (find.start_line, find.end_line) == (32, 34)

    run = cls.methods[2]
    assert run.return_type == "void"
    assert run.annotations == ("@Override",)
    assert run.javadoc is None


def test_param_docs_bind_by_name_only():
    find = analyze().types[0].methods[1]
    id_param, tags_param = find.parameters

    assert id_param.name == "id"
    assert id_param.type_name == "Long"
    assert id_param.is_final
    assert id_param.description == "the user id"

    assert tags_param.is_varargs
    assert tags_param.full_type == "String..."
    assert tags_param.description is None

    # @param missing has no parameter to bind to
    assert all(p.description != "not a parameter" for p in find.parameters)
    # first @return wins
    assert find.return_description == "the user, if any"
    assert find.short_signature == "find(Long, String...)"


def test_duplicate_param_tag_binds_first():
    code = "\n".join([
        "class A {",
        "  /**",
        "   * @param x first text",
        "   * @param x second text",
        "   */",
        "  void set(int x) {}",
        "}",
    ])
    (method,) = analyze(code).types[0].methods
    assert method.parameters[0].description == "first text"


def test_nested_types_have_composed_qualified_names():
    source = analyze()
    cls = source.types[0]
    assert [n.name for n in cls.nested_types] == ["Inner", "Color"]

    inner = get_type(source, "Inner")
    assert inner.qualified_name == "com.example.app.UserService.Inner"
    assert inner.modifiers == ("static",)

    deep = get_type(source, "Deep")
    assert deep.qualified_name == "com.example.app.UserService.Inner.Deep"
    assert inner.nested_types == (deep,)


def test_enum_members():
    color = get_type(analyze(), "Color")
    assert color.kind == "enum"
    assert [m.name for m in color.methods] == ["code"]
    assert color.methods[0].return_type == "int"
    assert color.super_class is None
    assert color.fields == ()


def test_interface_generics_and_extends():
    code = """\
package p;

public interface Repo<T extends Comparable<T>> extends Base, Other {
    T get();
    List<? extends Number> all(Map.Entry<String, int[]> e);
}
"""
    source = JavaAdapter().analyze_source(code)
    repo = source.types[0]
    assert repo.kind == "interface"
    assert repo.type_parameters == ("T extends Comparable<T>",)
    assert repo.super_class == "Other"
    assert repo.interfaces == ()

    get, all_ = repo.methods
    assert get.return_type == "T"
    assert all_.return_type == "List<? extends Number>"
    assert all_.parameters[0].type_name == "Map.Entry<String, int[]>"


def test_annotation_type():
    code = "@interface Marker { String value(); }"
    source = JavaAdapter().analyze_source(code)
    marker = source.types[0]
    assert marker.kind == "annotation"
    assert marker.qualified_name == "Marker"
    assert marker.methods == ()


def test_default_package_falls_back_to_given_package():
    source = JavaAdapter().analyze_source("class A {}", package="given.pkg")
    assert source.types[0].qualified_name == "given.pkg.A"


def test_parse_failure_records_error_and_no_structure():
    source = JavaAdapter().analyze_source("public class { broken")
    assert not source.parsed
    assert source.parse_error.startswith("Parse failed: ")
    assert source.types == []


def test_empty_content():
    source = JavaAdapter().analyze_source("")
    assert not source.parsed
    assert source.parse_error == "No content to parse"


def test_extract_types_requires_tree():
    with pytest.raises(TypeError):
        JavaAdapter().extract_types(None, "pkg")


def test_analyze_files_keeps_going_after_failures():
    adapter = JavaAdapter()
    good = adapter.analyze_source("class Good { void a() {} }")
    bad = adapter.analyze_source("class Bad {")
    files = adapter.analyze_files([good, bad])
    assert [f.parsed for f in files] == [True, False]
    assert good.total_method_count == 1
