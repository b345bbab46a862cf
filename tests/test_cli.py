from pathlib import Path
from typing import Dict
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from codepack.cli.interface import main_cli


def create_project_structure(base_path: Path, files_to_create: Dict[str, str]):
    for rel_path, content in files_to_create.items():
        file_path = base_path / rel_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def no_user_config(tmp_path: Path):
    with patch("codepack.config.loader.USER_CONFIG_FILE", tmp_path / "no-user-config.toml"):
        yield


def make_project(root: Path) -> Path:
    proj_dir = root / "proj"
    create_project_structure(proj_dir, {
        ".gitignore": "# generated\nlib/*.gen.py\n",
        "main.py": "print('hi')\n",
        "lib/util.js": "export const x = 1;\n",
        "lib/model.gen.py": "GENERATED = True\n",
        "node_modules/dep/index.js": "module.exports = 1;\n",
        "notes.txt": "not code",
    })
    (proj_dir / ".git").mkdir()
    return proj_dir


def test_cli_packs_project_with_headers(runner: CliRunner):
    with runner.isolated_filesystem() as td:
        make_project(Path(td))

        result = runner.invoke(main_cli, ["--indir", "proj"], catch_exceptions=False)

        assert result.exit_code == 0
        packed = (Path(td) / "proj.txt").read_text()
        assert packed == (
            "// proj/lib/util.js \n"
            "export const x = 1;\n\n\n"
            "# proj/main.py \n"
            "print('hi')\n\n\n"
        )


def test_cli_refuses_to_overwrite_without_force(runner: CliRunner):
    with runner.isolated_filesystem() as td:
        make_project(Path(td))
        (Path(td) / "proj.txt").write_text("keep me")

        result = runner.invoke(main_cli, ["--indir", "proj"])

        assert result.exit_code == 1
        assert "Output file already exists. Use --force to overwrite." in result.output
        assert (Path(td) / "proj.txt").read_text() == "keep me"


def test_cli_force_overwrites(runner: CliRunner):
    with runner.isolated_filesystem() as td:
        make_project(Path(td))
        (Path(td) / "proj.txt").write_text("stale")

        result = runner.invoke(main_cli, ["--indir", "proj", "--force"])

        assert result.exit_code == 0
        assert (Path(td) / "proj.txt").read_text().startswith("// proj/lib/util.js \n")


def test_cli_custom_outfile_is_relative_to_cwd(runner: CliRunner):
    with runner.isolated_filesystem() as td:
        make_project(Path(td))

        result = runner.invoke(main_cli, ["--indir", "proj", "--outfile", "bundle.txt"])

        assert result.exit_code == 0
        assert (Path(td) / "bundle.txt").is_file()
        assert not (Path(td) / "proj.txt").exists()


def test_cli_verbose_reports_decisions(runner: CliRunner):
    with runner.isolated_filesystem() as td:
        proj_dir = make_project(Path(td))

        result = runner.invoke(main_cli, ["--indir", "proj", "-v"])

        assert result.exit_code == 0
        assert f"Input directory: {proj_dir.resolve()}" in result.output or f"Input directory: {proj_dir}" in result.output
        assert "Skipping (ignored by gitignore):" in result.output
        assert "model.gen.py" in result.output
        assert "Skipping (not a code file):" in result.output
        assert "Processing:" in result.output


def test_cli_no_ignore_packs_everything(runner: CliRunner):
    with runner.isolated_filesystem() as td:
        make_project(Path(td))

        result = runner.invoke(main_cli, ["--indir", "proj", "--no-ignore"])

        assert result.exit_code == 0
        packed = (Path(td) / "proj.txt").read_text()
        assert "# proj/lib/model.gen.py \n" in packed
        assert "// proj/node_modules/dep/index.js \n" in packed


def test_cli_exclude_option(runner: CliRunner):
    with runner.isolated_filesystem() as td:
        make_project(Path(td))

        result = runner.invoke(main_cli, ["--indir", "proj", "-e", "lib/"])

        assert result.exit_code == 0
        assert (Path(td) / "proj.txt").read_text() == "# proj/main.py \nprint('hi')\n\n\n"


def test_cli_unreadable_gitignore_warns_and_packs_unfiltered(runner: CliRunner):
    with runner.isolated_filesystem() as td:
        proj_dir = make_project(Path(td))
        (proj_dir / ".gitignore").write_bytes(b"\xff\xfe\n")

        result = runner.invoke(main_cli, ["--indir", "proj"])

        assert result.exit_code == 0
        assert "Warning: Error loading .gitignore" in result.output
        assert "// proj/node_modules/dep/index.js \n" in (Path(td) / "proj.txt").read_text()


def test_cli_unreadable_gitignore_partial_policy_keeps_builtin_exclusions(runner: CliRunner):
    with runner.isolated_filesystem() as td:
        proj_dir = make_project(Path(td))
        (proj_dir / ".gitignore").write_bytes(b"\xff\xfe\n")

        result = runner.invoke(main_cli, ["--indir", "proj", "--ignore-errors", "partial"])

        assert result.exit_code == 0
        packed = (Path(td) / "proj.txt").read_text()
        assert "node_modules" not in packed
        assert "# proj/lib/model.gen.py \n" in packed


def test_cli_unreadable_gitignore_abort_policy(runner: CliRunner):
    with runner.isolated_filesystem() as td:
        proj_dir = make_project(Path(td))
        (proj_dir / ".gitignore").write_bytes(b"\xff\xfe\n")

        result = runner.invoke(main_cli, ["--indir", "proj", "--ignore-errors", "abort"])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert not (Path(td) / "proj.txt").exists()


def test_cli_unreadable_gitignore_warning_precedes_output_error(runner: CliRunner):
    with runner.isolated_filesystem() as td:
        proj_dir = make_project(Path(td))
        (proj_dir / ".gitignore").write_bytes(b"\xff\xfe\n")
        (Path(td) / "proj.txt").write_text("old")

        result = runner.invoke(main_cli, ["--indir", "proj"])

        assert result.exit_code == 1
        assert "Warning: Error loading .gitignore" in result.output
        assert "Output file already exists" in result.output
        assert result.output.index("Warning: Error loading .gitignore") < result.output.index("Output file already exists")
        assert (Path(td) / "proj.txt").read_text() == "old"


def test_cli_wrongly_typed_config_value_is_reported(runner: CliRunner):
    with runner.isolated_filesystem() as td:
        proj_dir = make_project(Path(td))
        (proj_dir / ".gitignore").write_bytes(b"\xff\xfe\n")
        (Path(td) / ".codepack.toml").write_text("ignore_errors = 1\n")

        result = runner.invoke(main_cli, ["--indir", "proj"])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "ignore_errors" in result.output
        assert not isinstance(result.exception, AttributeError)
        assert not (Path(td) / "proj.txt").exists()


def test_cli_verbose_from_config_enables_info_logs(runner: CliRunner):
    with runner.isolated_filesystem() as td:
        make_project(Path(td))
        (Path(td) / ".codepack.toml").write_text("verbose = true\n")

        result = runner.invoke(main_cli, ["--indir", "proj"])

        assert result.exit_code == 0
        assert "Processing:" in result.output
        assert "repository_root_found" in result.output


def test_cli_missing_input_directory(runner: CliRunner):
    with runner.isolated_filesystem() as td:
        result = runner.invoke(main_cli, ["--indir", "nowhere"])

        assert result.exit_code == 1
        assert "input directory does not exist" in result.output
        assert not (Path(td) / "nowhere.txt").exists()


def test_cli_config_profile(runner: CliRunner):
    with runner.isolated_filesystem() as td:
        make_project(Path(td))
        (Path(td) / ".codepack.toml").write_text('[profiles.js_only]\nexclude_patterns = ["*.py"]\noutfile = "js.txt"\n')

        result = runner.invoke(main_cli, ["--indir", "proj", "--config-profile", "js_only"])

        assert result.exit_code == 0
        assert (Path(td) / "js.txt").read_text() == "// proj/lib/util.js \nexport const x = 1;\n\n\n"


def test_cli_command_line_overrides_profile(runner: CliRunner):
    with runner.isolated_filesystem() as td:
        make_project(Path(td))
        (Path(td) / ".codepack.toml").write_text('[profiles.js_only]\nexclude_patterns = ["*.py"]\noutfile = "js.txt"\n')

        result = runner.invoke(main_cli, ["--indir", "proj", "--config-profile", "js_only", "--outfile", "cli.txt"])

        assert result.exit_code == 0
        assert (Path(td) / "cli.txt").is_file()
        assert not (Path(td) / "js.txt").exists()


def test_cli_summary(runner: CliRunner):
    with runner.isolated_filesystem() as td:
        make_project(Path(td))

        result = runner.invoke(main_cli, ["--indir", "proj", "--summary"])

        assert result.exit_code == 0
        assert "Files packed: 2" in result.output
        assert "Skipped (ignored): 3" in result.output
        assert "Ignore rules: 1 pattern(s)" in result.output


def test_cli_help_and_version(runner: CliRunner):
    help_result = runner.invoke(main_cli, ["--help"])
    assert help_result.exit_code == 0
    assert "--indir" in help_result.output
    assert "Concatenate all code files into a single output file" in help_result.output

    version_result = runner.invoke(main_cli, ["--version"])
    assert version_result.exit_code == 0
    assert "codepack" in version_result.output
