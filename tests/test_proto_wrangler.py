import json
import os
import pytest

import proto_wrangler
from proto_wrangler import main, EXIT_SUCCESS, EXIT_PROCESSING_ERROR, EXIT_CONFIGURATION_ERROR
from generators.generator_utils import DERIVE_NAMESPACE


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ("PW_INCLUDE_PATH", "PW_FORMAT", "PW_NAMESPACE", "PW_MIN", "PW_VERBOSE"):
        monkeypatch.delenv(name, raising=False)


def test_default_output_is_pretty_json(proto_dir, capsys):
    code = main([os.path.join(proto_dir, "diamond_root.proto")])
    out, err = capsys.readouterr()
    assert code == EXIT_SUCCESS
    data = json.loads(out)
    assert data["package"] == "diamond"
    assert out.endswith("}\n")
    assert err == ""


def test_commonjs_compact(proto_dir, capsys):
    code = main([os.path.join(proto_dir, "complex.proto"), "--format", "commonjs", "--min"])
    out, _ = capsys.readouterr()
    assert code == EXIT_SUCCESS
    assert out.startswith('module.exports=require("protobufjs").newBuilder({})')
    assert out.count("\n") == 1


def test_namespace_flag_without_value_derives_package(proto_dir, capsys):
    code = main([os.path.join(proto_dir, "complex.proto"), "-f", "amd", "-n"])
    out, _ = capsys.readouterr()
    assert code == EXIT_SUCCESS
    assert out.startswith('define("foo/bar", ["ProtoBuf"], function(ProtoBuf) {')


def test_explicit_namespace(proto_dir, capsys):
    code = main([os.path.join(proto_dir, "complex.proto"), "-f", "shim", "-n", "foo.bar.Message"])
    out, _ = capsys.readouterr()
    assert code == EXIT_SUCCESS
    assert out.splitlines()[0] == "var foo = foo || {};"


def test_invalid_namespace_is_processing_error(proto_dir, capsys):
    code = main([os.path.join(proto_dir, "complex.proto"), "-f", "shim", "-n", "foo.baz"])
    out, err = capsys.readouterr()
    assert code == EXIT_PROCESSING_ERROR
    assert out == ""
    assert "[ERROR]" in err and "foo.baz" in err


def test_missing_include_dir_is_configuration_error(proto_dir, temp_dir, capsys):
    missing = os.path.join(temp_dir, "missing")
    code = main([os.path.join(proto_dir, "uses_include.proto"), "-p", missing])
    out, err = capsys.readouterr()
    assert code == EXIT_CONFIGURATION_ERROR
    assert out == ""
    assert missing in err


def test_configuration_checked_before_parsing(temp_dir, capsys):
    # Neither the input nor the include dir exist; the include dir wins
    code = main([os.path.join(temp_dir, "absent.proto"), "-p", os.path.join(temp_dir, "nope")])
    capsys.readouterr()
    assert code == EXIT_CONFIGURATION_ERROR


def test_include_path_option(proto_dir, capsys):
    code = main([os.path.join(proto_dir, "uses_include.proto"), "-p", os.path.join(proto_dir, "include")])
    out, _ = capsys.readouterr()
    assert code == EXIT_SUCCESS
    assert [i["package"] for i in json.loads(out)["imports"]] == ["shared", "app.sub"]


def test_unresolved_import_is_processing_error(proto_dir, capsys):
    code = main([os.path.join(proto_dir, "missing_import.proto")])
    out, err = capsys.readouterr()
    assert code == EXIT_PROCESSING_ERROR
    assert out == ""
    assert os.path.join(proto_dir, "does_not_exist.proto") in err


def test_parse_error_is_processing_error(proto_dir, capsys):
    code = main([os.path.join(proto_dir, "invalid.proto")])
    _, err = capsys.readouterr()
    assert code == EXIT_PROCESSING_ERROR
    assert "invalid.proto:4" in err


def test_missing_input_is_processing_error(temp_dir, capsys):
    code = main([os.path.join(temp_dir, "absent.proto")])
    out, _ = capsys.readouterr()
    assert code == EXIT_PROCESSING_ERROR
    assert out == ""


def test_cycle_is_processing_error(proto_dir, capsys):
    code = main([os.path.join(proto_dir, "cycle_a.proto")])
    _, err = capsys.readouterr()
    assert code == EXIT_PROCESSING_ERROR
    assert "Import cycle detected" in err


def test_verbose_logs_to_stderr(proto_dir, capsys):
    code = main([os.path.join(proto_dir, "diamond_root.proto"), "--verbose"])
    out, err = capsys.readouterr()
    assert code == EXIT_SUCCESS
    assert "[DEBUG]" in err
    assert "[DEBUG]" not in out
    json.loads(out)


def test_environment_overrides(proto_dir, monkeypatch, capsys):
    monkeypatch.setenv("PW_INCLUDE_PATH", os.path.join(proto_dir, "include"))
    monkeypatch.setenv("PW_FORMAT", "commonjs")
    monkeypatch.setenv("PW_MIN", "1")
    code = main([os.path.join(proto_dir, "uses_include.proto")])
    out, _ = capsys.readouterr()
    assert code == EXIT_SUCCESS
    assert out.startswith("module.exports=")


def test_empty_namespace_environment_derives_package(proto_dir, monkeypatch):
    monkeypatch.setenv("PW_NAMESPACE", "")
    args = proto_wrangler.parse_arguments([os.path.join(proto_dir, "complex.proto")])
    assert args.namespace is DERIVE_NAMESPACE


def test_invalid_format_environment_is_rejected(proto_dir, monkeypatch):
    monkeypatch.setenv("PW_FORMAT", "xml")
    with pytest.raises(SystemExit):
        proto_wrangler.parse_arguments([os.path.join(proto_dir, "complex.proto")])


def test_non_utf8_root_is_processing_error(temp_dir, capsys):
    root = os.path.join(temp_dir, "root.proto")
    with open(root, "wb") as f:
        f.write(b'package root;\nmessage M {}\n// \xff\xfe\n')
    code = main([root])
    out, err = capsys.readouterr()
    assert code == EXIT_PROCESSING_ERROR
    assert out == ""
    assert "[ERROR]" in err and root in err


def test_non_utf8_import_is_processing_error(temp_dir, capsys):
    root = os.path.join(temp_dir, "root.proto")
    with open(root, "w") as f:
        f.write('package root;\nimport "bad.proto";\n')
    with open(os.path.join(temp_dir, "bad.proto"), "wb") as f:
        f.write(b"package bad;\n// \xff\n")
    code = main([root])
    out, err = capsys.readouterr()
    assert code == EXIT_PROCESSING_ERROR
    assert out == ""
    assert "[ERROR]" in err and "bad.proto" in err
