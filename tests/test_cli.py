"""Tests for the command-line interface."""
from unittest.mock import patch

import pytest
import yaml

from apivisibility.cli import (
    CLIError,
    build_config_from_args,
    load_app,
    load_configuration,
    main,
    parse_arguments,
    parse_operation,
)
from apivisibility.core.constants import APIVISIBILITY_VERSION, ErrorCode


def report_rows(output):
    """Map operation label to the VISIBLE column of a text report."""
    lines = output.splitlines()
    header = lines.index(next(line for line in lines if line.startswith("OPERATION")))
    return {line.split()[0]: line.split()[1] for line in lines[header + 1:-1]}


class TestParseArguments:
    """Tests for argument parsing and validation."""

    def test_operations(self):
        args = parse_arguments(["-o", "User.GetUser", "--operation", "WeatherForecast"])
        assert args.operations == ["User.GetUser", "WeatherForecast"]
        assert args.format == "text"

    def test_masks(self):
        args = parse_arguments(["--visible", "User.*", "*.Get*", "--hidden", "User.Delete*", "--demo"])
        assert args.visible == ["User.*", "*.Get*"]
        assert args.hidden == ["User.Delete*"]

    def test_nothing_to_classify(self):
        with pytest.raises(CLIError, match="Nothing to classify"):
            parse_arguments([])

    def test_check_alone_is_enough(self):
        assert parse_arguments(["--check"]).check is True

    def test_app_and_demo_conflict(self):
        with pytest.raises(CLIError, match="cannot be combined"):
            parse_arguments(["--app", "x:y", "--demo"])

    def test_app_needs_attribute(self):
        with pytest.raises(CLIError, match="MODULE:ATTR"):
            parse_arguments(["--app", "myservice.main"])

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(CLIError, match="does not exist") as exc_info:
            parse_arguments(["--config", str(tmp_path / "missing.yaml"), "--check"])
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    def test_config_path_is_directory(self, tmp_path):
        with pytest.raises(CLIError, match="not a file"):
            parse_arguments(["--config", str(tmp_path), "--check"])

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_arguments(["--version"])

        assert exc_info.value.code == 0
        assert APIVISIBILITY_VERSION in capsys.readouterr().out

    def test_unknown_format_rejected(self):
        with pytest.raises(SystemExit):
            parse_arguments(["--demo", "--format", "html"])


class TestConfiguration:
    """Tests for configuration assembly."""

    def test_only_given_masks_are_set(self):
        args = parse_arguments(["--hidden", "User.*", "--check"])
        assert build_config_from_args(args) == {"ApiConfiguration": {"HiddenItems": ["User.*"]}}

    def test_debug_sets_log_level(self):
        args = parse_arguments(["--debug", "--check"])
        assert build_config_from_args(args) == {"logging": {"level": "DEBUG"}}

    def test_cli_masks_override_file(self, config_file):
        args = parse_arguments(["--config", str(config_file), "--hidden", "Admin", "--check"])
        configuration = load_configuration(args).get_api_configuration()

        assert configuration.visible_items == ["User.*", "WeatherForecast.Get*"]
        assert configuration.hidden_items == ["Admin"]

    def test_environment_below_cli(self, monkeypatch):
        monkeypatch.setenv("APIVISIBILITY_HIDDEN_ITEMS", "User.*,Admin")
        monkeypatch.setenv("APIVISIBILITY_VISIBLE_ITEMS", "*")
        args = parse_arguments(["--visible", "User", "--check"])
        configuration = load_configuration(args).get_api_configuration()

        assert configuration.visible_items == ["User"]
        assert configuration.hidden_items == ["User.*", "Admin"]


class TestHelpers:
    """Tests for operation parsing and app loading."""

    def test_parse_operation(self):
        assert parse_operation("User.GetUser") == ("User", "GetUser")
        assert parse_operation("User") == ("User", None)

    def test_load_app_factory(self):
        app = load_app("apivisibility.demo:create_demo_app")
        assert hasattr(app, "routes")

    def test_load_app_missing_module(self):
        with pytest.raises(CLIError, match="Cannot import"):
            load_app("apivisibility_no_such_module:app")

    def test_load_app_missing_attribute(self):
        with pytest.raises(CLIError, match="has no attribute"):
            load_app("apivisibility.demo:no_such_app")


class TestMain:
    """End-to-end tests through main()."""

    def test_classify_operations(self, capsys):
        code = main(["--hidden", "User.*", "-o", "User.GetUser", "-o", "WeatherForecast.GetWeatherForecast"])
        output = capsys.readouterr().out

        assert code == 0
        assert output.startswith("Mode: exclude\n")
        assert report_rows(output) == {
            "User.GetUser": "no",
            "WeatherForecast.GetWeatherForecast": "yes",
        }

    def test_demo_with_config_file(self, config_file, capsys):
        code = main(["--config", str(config_file), "--demo"])
        output = capsys.readouterr().out

        assert code == 0
        assert report_rows(output) == {
            "User.GetUser": "yes",
            "User.SetUser": "yes",
            "User.DeleteUser": "no",
            "WeatherForecast.GetWeatherForecast": "yes",
            "WeatherForecast.DeleteWeatherForecast": "no",
        }
        assert "3 visible, 2 hidden" in output

    def test_app_option(self, capsys):
        code = main(["--visible", "WeatherForecast", "--app", "apivisibility.demo:create_demo_app"])
        rows = report_rows(capsys.readouterr().out)

        assert code == 0
        assert rows["WeatherForecast.GetWeatherForecast"] == "yes"
        assert rows["User.GetUser"] == "no"

    def test_markdown(self, capsys):
        code = main(["--hidden", "User.Delete*", "-o", "User.DeleteUser", "--format", "markdown"])
        output = capsys.readouterr().out

        assert code == 0
        assert "| `User.DeleteUser` | no |  | `User.Delete*` |" in output

    def test_check_success(self, config_file, capsys):
        assert main(["--config", str(config_file), "--check"]) == 0
        assert capsys.readouterr().out == ""

    def test_check_failure(self, capsys):
        assert main(["--visible", "User.Get(*", "--check"]) == 1
        assert "Invalid entry in VisibleItems at index 0" in capsys.readouterr().err

    def test_invalid_mask_while_classifying(self, capsys):
        assert main(["--visible", "User.Get(*", "-o", "User.GetUser"]) == 1
        assert "Invalid pattern" in capsys.readouterr().err

    def test_missing_group_name(self, capsys):
        assert main(["-o", ".GetUser", "--hidden", "Admin"]) == 0
        assert main(["-o", "", "--hidden", "Admin"]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_usage_error(self, capsys):
        assert main([]) == 1
        assert "Nothing to classify" in capsys.readouterr().err

    def test_bad_config_file(self, tmp_path, capsys):
        config_path = tmp_path / "broken.yaml"
        config_path.write_text("ApiConfiguration: [unclosed")

        assert main(["--config", str(config_path), "--check"]) == 1
        assert "YAML parse error" in capsys.readouterr().err

    def test_mask_list_from_file_must_be_list(self, tmp_path, capsys):
        config_path = tmp_path / "appsettings.yaml"
        config_path.write_text(yaml.dump({"ApiConfiguration": {"HiddenItems": {"User": True}}}))

        assert main(["--config", str(config_path), "--check"]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_keyboard_interrupt(self, capsys):
        with patch("apivisibility.cli.run", side_effect=KeyboardInterrupt):
            assert main(["--check"]) == 130
        assert "Interrupted" in capsys.readouterr().err

    def test_report_error(self, capsys):
        from apivisibility.reporting import ReportError

        with patch("apivisibility.cli.render_report", side_effect=ReportError("broken")):
            assert main(["-o", "User"]) == 1
        assert "Error: broken" in capsys.readouterr().err


class TestLogging:
    """Logging configuration reaches engine and adapter loggers."""

    def write_config(self, tmp_path, level):
        config_path = tmp_path / "appsettings.yaml"
        config_path.write_text(
            yaml.dump(
                {
                    "ApiConfiguration": {"HiddenItems": ["User.Delete*"]},
                    "logging": {"level": level, "file": None},
                }
            )
        )
        return str(config_path)

    def test_error_level_silences_info(self, tmp_path, capsys):
        assert main(["--config", self.write_config(tmp_path, "ERROR"), "--demo"]) == 0
        err = capsys.readouterr().err

        assert "Visibility rules loaded" not in err
        assert "Visibility applied" not in err

    def test_debug_flag_reaches_package_loggers(self, tmp_path, capsys):
        assert main(["--config", self.write_config(tmp_path, "ERROR"), "--demo", "--debug"]) == 0
        err = capsys.readouterr().err

        assert "apivisibility.engine - DEBUG - Visibility decided" in err
        assert "apivisibility.fastapi - INFO - Visibility applied" in err

    def test_app_factory_sees_cli_configuration(self, capsys):
        assert main(["--hidden", "User", "--app", "apivisibility.demo:create_demo_app", "--debug"]) == 0
        err = capsys.readouterr().err

        assert "Route hidden from catalogue | operation=User.GetUser" in err
