from mdbrowse.app import main as app_main


def test_dump_prints_runs(isolated_config, tmp_path, capsys):
    doc = tmp_path / "topic.md"
    doc.write_text("# Title\nSee [the guide](guide)\n", encoding="utf-8")
    assert app_main.main(["--dump", str(doc)]) == 0
    out = capsys.readouterr().out.splitlines()
    assert "text  'Title' ['h1']" in out
    assert "link  #1 'the guide' ['link']" in out
    assert "      -> guide" in out


def test_dump_reports_missing_file(isolated_config, tmp_path, capsys):
    assert app_main.main(["--dump", str(tmp_path / "missing.md")]) == 1
    assert "cannot read" in capsys.readouterr().err


def test_debug_flag(monkeypatch):
    monkeypatch.setenv("MDBROWSE_DEBUG", "1")
    assert app_main._debug_enabled("MDBROWSE_DEBUG")
    monkeypatch.setenv("MDBROWSE_DEBUG", "false")
    assert not app_main._debug_enabled("MDBROWSE_DEBUG")
    monkeypatch.delenv("MDBROWSE_DEBUG", raising=False)
    assert not app_main._debug_enabled("MDBROWSE_DEBUG")


def test_parse_args():
    args = app_main._parse_args(["docs", "--home", "", "--history-max", "5"])
    assert args.docs == "docs"
    assert args.home == ""
    assert args.history_max == 5
    assert args.dump is None


def test_command_line_choices_are_remembered(isolated_config):
    from mdbrowse.app import config

    args = app_main._parse_args(
        ["docs", "--home", "index", "--history-max", "4", "--images", "/tmp/pics", "--file-pattern", r"(.*)\.txt$"]
    )
    app_main._persist_overrides(args)
    assert config.load_home_topic() == "index"
    assert config.load_history_max() == 4
    assert config.load_images_path() == "/tmp/pics"
    assert config.load_file_pattern() == r"(.*)\.txt$"


def test_unset_flags_keep_config(isolated_config):
    from mdbrowse.app import config

    config.save_home_topic("start")
    app_main._persist_overrides(app_main._parse_args([]))
    assert config.load_home_topic() == "start"
    assert config.load_images_path() is None


def test_qt_handler_drops_size_hint_noise(capsys):
    from PySide6.QtCore import QtMsgType

    app_main._qt_message_handler(QtMsgType.QtWarningMsg, None, "This plugin does not support propagateSizeHints()")
    app_main._qt_message_handler(QtMsgType.QtWarningMsg, None, "something real")
    err = capsys.readouterr().err
    assert "propagateSizeHints" not in err
    assert "Qt Warning: something real" in err
