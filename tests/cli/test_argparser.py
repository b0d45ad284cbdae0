"""Unit tests for the argument parser module in downgrade-build CLI."""

from pathlib import Path

import pytest

from downgrade_build.cli.argparser import create_parser, validate_args


@pytest.fixture
def project(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    (root / "package.json").write_text("{}")
    return root


def parse(*argv):
    return create_parser().parse_args(list(argv))


def test_defaults():
    args = parse()
    assert args.directory == Path(".")
    assert args.work_dir is None
    assert not args.dry_run
    assert not args.follow_symlinks
    assert args.permission_action == "warn"
    assert args.npm == "npm"
    assert not args.verbose
    assert not args.quiet
    assert args.script == []


def test_all_options(tmp_path):
    args = parse(
        "-d", str(tmp_path), "-w", str(tmp_path / "w"), "-L", "-P", "fail", "--npm", "pnpm", "-v", "build", "--prod"
    )
    assert args.directory == tmp_path
    assert args.work_dir == tmp_path / "w"
    assert args.follow_symlinks
    assert args.permission_action == "fail"
    assert args.npm == "pnpm"
    assert args.verbose
    assert args.script == ["build", "--prod"]


def test_script_arguments_are_passed_through():
    args = parse("test", "--", "--coverage", "-v")
    assert args.script[0] == "test"
    assert args.script[-2:] == ["--coverage", "-v"]
    assert not args.verbose


def test_invalid_permission_action():
    with pytest.raises(SystemExit) as exc_info:
        parse("-P", "explode")
    assert exc_info.value.code == 2


def test_verbose_and_quiet_are_exclusive():
    with pytest.raises(SystemExit) as exc_info:
        parse("-v", "-q")
    assert exc_info.value.code == 2


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        parse("--version")
    assert exc_info.value.code == 0
    assert capsys.readouterr().out.startswith("downgrade-build ")


def test_validate_defaults_script_to_test(project):
    args = parse("-d", str(project))
    validate_args(args)
    assert args.script == ["test"]


def test_validate_strips_leading_separator(project):
    args = parse("-d", str(project), "--", "lint", "--fix")
    validate_args(args)
    assert args.script == ["lint", "--fix"]


def test_validate_lone_separator(project):
    args = parse("-d", str(project), "--")
    validate_args(args)
    assert args.script == ["test"]


def test_validate_missing_directory(tmp_path):
    args = parse("-d", str(tmp_path / "missing"))
    with pytest.raises(ValueError, match="not a valid directory"):
        validate_args(args)


def test_validate_missing_package_file(tmp_path):
    args = parse("-d", str(tmp_path))
    with pytest.raises(ValueError, match="does not contain a package.json"):
        validate_args(args)


def test_validate_work_dir_is_file(project, tmp_path):
    work = tmp_path / "file"
    work.write_text("")
    args = parse("-d", str(project), "-w", str(work))
    with pytest.raises(ValueError, match="is not a directory"):
        validate_args(args)


def test_validate_work_dir_not_empty(project, tmp_path):
    work = tmp_path / "work"
    work.mkdir()
    (work / "leftover").write_text("")
    args = parse("-d", str(project), "-w", str(work))
    with pytest.raises(ValueError, match="is not empty"):
        validate_args(args)


def test_validate_work_dir_empty_or_missing(project, tmp_path):
    (tmp_path / "empty").mkdir()
    validate_args(parse("-d", str(project), "-w", str(tmp_path / "empty")))
    validate_args(parse("-d", str(project), "-w", str(tmp_path / "new")))


def test_validate_dry_run_with_work_dir(project, tmp_path):
    args = parse("-d", str(project), "-n", "-w", str(tmp_path / "work"))
    with pytest.raises(ValueError, match="--dry-run"):
        validate_args(args)
