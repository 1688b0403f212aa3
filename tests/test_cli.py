"""Tests for the postgen command line."""

from __future__ import annotations

import json

import pytest

from postgen.cli import main


def test_build_prints_summary(input_dir, output_dir, write_post, capsys):
    write_post("a.md")
    write_post("b.md")
    assert main([str(input_dir), str(output_dir)]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Processed 2 markdowns in ")
    assert out.rstrip().endswith("ms")
    assert (output_dir / "posts.json").exists()


def test_quiet(input_dir, output_dir, write_post, capsys):
    write_post("a.md")
    assert main([str(input_dir), str(output_dir), "--quiet"]) == 0
    assert capsys.readouterr().out == ""


def test_posts_flag_and_force(input_dir, output_dir, write_post, capsys):
    write_post("a.md")
    assert main([str(input_dir), str(output_dir), "--posts", "list"]) == 0
    assert main([str(input_dir), str(output_dir), "--posts", "list", "--force"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[1].startswith("Processed 1 markdowns")
    assert json.loads((output_dir / "list.json").read_text(encoding="utf-8"))[0]["name"] == "a"


def test_render_errors_go_to_stderr(input_dir, output_dir, write_post, capsys):
    write_post("post.md", text="no front matter\n")
    assert main([str(input_dir), str(output_dir)]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "An error has found on" in captured.err
    assert "post.md" in captured.err
    assert "No front-matter detected" in captured.err


def test_duplicates_are_listed(input_dir, output_dir, write_post, capsys):
    write_post("x.md")
    write_post("y-[x].md")
    assert main([str(input_dir), str(output_dir)]) == 1
    err = capsys.readouterr().err
    assert "The following files have duplicated name" in err
    assert "x:" in err
    assert "y-[x].md" in err


def test_invalid_names_are_listed(input_dir, output_dir, write_post, capsys):
    write_post("bad name.md")
    assert main([str(input_dir), str(output_dir)]) == 1
    err = capsys.readouterr().err
    assert "The following file names are not valid" in err
    assert " - " in err


def test_missing_input_dir(tmp_path, capsys):
    assert main([str(tmp_path / "nope"), str(tmp_path / "out")]) == 1
    assert "Input directory not found" in capsys.readouterr().err


def test_config_file_provides_defaults(input_dir, output_dir, write_post, tmp_path):
    write_post("a.md")
    config = tmp_path / "postgen.toml"
    config.write_text('posts = "feed"\n', encoding="utf-8")
    assert main([str(input_dir), str(output_dir), "--config", str(config), "--quiet"]) == 0
    assert (output_dir / "feed.json").exists()


def test_broken_config_file(input_dir, output_dir, tmp_path, capsys):
    config = tmp_path / "postgen.json"
    config.write_text("{", encoding="utf-8")
    assert main([str(input_dir), str(output_dir), "--config", str(config)]) == 1
    assert "Invalid JSON" in capsys.readouterr().err


def test_metadata_flag(input_dir, output_dir, write_post, tmp_path):
    meta = tmp_path / "meta.json"
    meta.write_text('{"categories": ["notes"]}', encoding="utf-8")
    write_post("a.md", category="[notes]")
    assert main([str(input_dir), str(output_dir), "--metadata", str(meta), "--quiet"]) == 0
    assert json.loads((output_dir / "metadata.json").read_text(encoding="utf-8")) == {
        "series": {},
        "categories": {"notes": {}},
    }


def test_usage_error_exits_2(capsys):
    with pytest.raises(SystemExit) as info:
        main([])
    assert info.value.code == 2


def test_write_failure_goes_to_stderr(input_dir, output_dir, write_post, capsys):
    write_post("a.md")
    (output_dir / "posts.json").mkdir(parents=True)
    (output_dir / "posts.json" / "keep").write_text("", encoding="utf-8")
    assert main([str(input_dir), str(output_dir)]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Could not write" in captured.err
    assert "posts.json" in captured.err
