import json

from PIL import Image

from scoutlens import cli


def _png(tmp_path, color=(210, 30, 30)):
    path = tmp_path / "shot.png"
    Image.new("RGB", (400, 300), color).save(path)
    return path


def test_text_command_with_mocks(capsys):
    code = cli.main(["text", "$SOL pump incoming", "--use-mocks"])

    payload = json.loads(capsys.readouterr().out)
    assert code == 0
    assert payload["mode"] == "text-backend"
    assert payload["signal"]["tokens"] == ["SOL"]


def test_text_command_offline_fails(capsys):
    code = cli.main(["text", "$SOL", "--use-mocks", "--offline"])

    payload = json.loads(capsys.readouterr().out)
    assert code == 1
    assert payload["success"] is False


def test_image_command_offline_uses_local_tier(tmp_path, capsys):
    code = cli.main(["image", str(_png(tmp_path)), "--use-mocks", "--offline"])

    payload = json.loads(capsys.readouterr().out)
    assert code == 0
    assert payload["mode"] == "ocr-only"
    assert payload["signal"]["tokens"] == ["SOL", "JUP", "BONK"]


def test_image_command_missing_file_falls_back(tmp_path, capsys):
    code = cli.main(["image", str(tmp_path / "missing.png"), "--offline"])

    payload = json.loads(capsys.readouterr().out)
    assert code == 1
    assert payload["mode"] == "fallback"


def test_status_written_to_out_file(tmp_path):
    out = tmp_path / "status.json"

    code = cli.main(["status", "--use-mocks", "--out", str(out), "--timeout", "2"])

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert code == 0
    assert payload["status"]["ready"] is True
    assert payload["capabilities"]["backend"] is True
    assert payload["config"]["backend_timeout"] == 2.0


def test_backend_url_flag_overrides_env(monkeypatch):
    monkeypatch.setenv("SCOUTLENS_BACKEND_URL", "http://from-env/api/process")
    args = cli._parser().parse_args(["status", "--backend-url", "http://flag/api/process"])

    assert cli.build_config(args).backend_url == "http://flag/api/process"
