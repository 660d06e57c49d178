import logging

import pytest

import task_deadline as td


def write_config(tmp_path, text: str):
    path = tmp_path / 'config.yaml'
    path.write_text(text, encoding='utf-8')
    return path


def test_load_config_defaults_when_missing(tmp_path):
    cfg = td.load_config(str(tmp_path / 'missing.yaml'))
    assert cfg == td.Config()
    assert td.load_config(None).display_style == 'slash'


def test_load_config_reads_yaml(tmp_path):
    path = write_config(tmp_path, (
        "display_style: Kanji\n"
        "log_level: debug\n"
        f"log_path: {tmp_path / 'x.log'}\n"
        "theme:\n"
        "  picker.title: 'bold #ff0000'\n"
    ))
    cfg = td.load_config(str(path))
    assert cfg.display_style == 'kanji'
    assert cfg.log_level == 'debug'
    assert cfg.log_path == str(tmp_path / 'x.log')
    assert td.theme_style(cfg)['picker.title'] == 'bold #ff0000'
    assert td.theme_style(cfg)['picker.day'] == td.BASE_THEME_STYLE['picker.day']


def test_load_config_rejects_unknown_style(tmp_path):
    path = write_config(tmp_path, "display_style: roman\n")
    with pytest.raises(ValueError, match='display_style'):
        td.load_config(str(path))


def test_load_config_rejects_non_mapping(tmp_path):
    path = write_config(tmp_path, "- a\n- b\n")
    with pytest.raises(ValueError, match='mapping'):
        td.load_config(str(path))


def test_empty_config_file_uses_defaults(tmp_path):
    path = write_config(tmp_path, "")
    assert td.load_config(str(path)) == td.Config()


def test_setup_logging_writes_at_configured_level(temp_log_path):
    log = td.setup_logging('WARNING', str(temp_log_path))
    assert len(log.handlers) == 1
    td.format_slash('broken')
    td.parse_deadline('also broken')  # debug only
    for h in log.handlers:
        h.flush()
    content = temp_log_path.read_text(encoding='utf-8')
    assert 'WARNING' in content
    assert "'broken'" in content
    assert 'also broken' not in content


def test_setup_logging_replaces_handlers(temp_log_path):
    td.setup_logging('ERROR', str(temp_log_path))
    td.setup_logging('DEBUG', str(temp_log_path))
    assert len(td.logger.handlers) == 1
    assert td.logger.handlers[0].level == logging.DEBUG


@pytest.fixture
def cli_config(tmp_path, temp_log_path):
    return str(write_config(tmp_path, f"log_path: {temp_log_path}\n"))


def test_cli_normalize(cli_config, capsys):
    td.main(['--config', cli_config, '--normalize', '2025/10/25 16:30'])
    assert capsys.readouterr().out == '2025-10-25T07:30:00Z\n'


def test_cli_normalize_empty_prints_blank(cli_config, capsys):
    td.main(['--config', cli_config, '--normalize', ''])
    assert capsys.readouterr().out == '\n'


def test_cli_normalize_unrecognized_exits_nonzero(cli_config, capsys):
    with pytest.raises(SystemExit) as exc:
        td.main(['--config', cli_config, '--normalize', 'soon'])
    assert exc.value.code == 1
    assert 'Unrecognized deadline text: soon' in capsys.readouterr().err


def test_cli_format_styles(cli_config, capsys):
    td.main(['--config', cli_config, '--format', '2025-10-25T07:00:00Z', '--style', 'kanji'])
    td.main(['--config', cli_config, '--format', '2025-10-25T07:00:00Z'])
    assert capsys.readouterr().out == '2025年10月25日16時\n2025/10/25 16:00\n'


def test_cli_remaining_overdue(cli_config, capsys):
    td.main(['--config', cli_config, '--remaining', '2000-01-01T00:00:00Z'])
    assert capsys.readouterr().out == td.OVERDUE_LABEL + '\n'


def test_cli_pick_prints_display_and_stored(cli_config, capsys, monkeypatch, clock):
    def fake_run_picker(seed_text, cfg):
        assert seed_text == '2025/10/25 16:30'
        s = td.PickerSession(clock=clock)
        s.open(seed_text)
        s.select_time('18:00')
        s.confirm()
        return s

    monkeypatch.setattr(td, 'run_picker', fake_run_picker)
    td.main(['--config', cli_config, '--pick', '2025/10/25 16:30'])
    assert capsys.readouterr().out == '2025/10/25 18:00\n2025-10-25T09:00:00Z\n'


def test_cli_pick_cleared_prints_blank(cli_config, capsys, monkeypatch, clock):
    def fake_run_picker(seed_text, cfg):
        assert seed_text is None
        s = td.PickerSession(clock=clock)
        s.open(seed_text)
        s.clear()
        return s

    monkeypatch.setattr(td, 'run_picker', fake_run_picker)
    td.main(['--config', cli_config, '--pick'])
    assert capsys.readouterr().out == '\n'
