import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from bakalari_timetable.app.cli import parse_args, prompt_choice
from bakalari_timetable.app.orchestrator import run_extraction, with_retries
from bakalari_timetable.main import main
from bakalari_timetable.models import SubjectKind, Which
from bakalari_timetable.utils.error_utils import LoginFailedError, RequestTransportError

from conftest import BASE_URL


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ("BAKALARI_URL", "BAKALARI_USERNAME", "BAKALARI_PASSWORD"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"url": BASE_URL, "username": "user", "password": "secret"}), encoding="utf-8")
    return path


def make_args(config_file, tmp_path, *argv):
    return parse_args([
        "--config", str(config_file),
        "--output", str(tmp_path / "timetable.json"),
        "--output-dir", str(tmp_path / "all"),
        *argv,
    ])


def test_parse_args_defaults():
    args = parse_args([])
    assert args.output == "timetable.json"
    assert args.retries == 0
    assert args.kind is None
    assert not args.serve
    assert args.port == 3000


def test_parse_args_rejects_unknown_kind():
    with pytest.raises(SystemExit):
        parse_args(["--kind", "student"])


def test_prompt_choice_by_number_and_text():
    with patch("builtins.input", side_effect=["0", "x", "2"]):
        assert prompt_choice("Timetable type", list(SubjectKind)) == SubjectKind.CLASS
    with patch("builtins.input", side_effect=["next"]):
        assert prompt_choice("Timetable window", list(Which)) == Which.NEXT


def test_extract_single_timetable(portal, config_file, tmp_path):
    args = make_args(config_file, tmp_path, "--kind", "class", "--which", "actual", "--name", "2.A")

    assert asyncio.run(run_extraction(args, transport=portal.transport)) == 0

    data = json.loads((tmp_path / "timetable.json").read_text(encoding="utf-8"))
    assert len(data["hours"]) == 3
    assert data["days"][0]["lessons"][0][0]["class"] == "2.A"
    assert portal.requests[-1].url.path == "/timetable/public/actual/class/2A"


def test_interactive_selection(portal, config_file, tmp_path):
    args = make_args(config_file, tmp_path)

    with patch("builtins.input", side_effect=["class", "1", "1.B"]):
        assert asyncio.run(run_extraction(args, transport=portal.transport)) == 0
    assert portal.requests[-1].url.path == "/timetable/public/permanent/class/1B"


def test_list_names(portal, config_file, tmp_path, capsys):
    args = make_args(config_file, tmp_path, "--kind", "room", "--list")

    assert asyncio.run(run_extraction(args, transport=portal.transport)) == 0
    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["207", "Tělocvična"]
    assert "Opening session" in captured.err


def test_extract_all(portal, config_file, tmp_path):
    args = make_args(config_file, tmp_path, "--kind", "class", "--which", "next", "--all")

    assert asyncio.run(run_extraction(args, transport=portal.transport)) == 0
    written = sorted(p.name for p in (tmp_path / "all").iterdir())
    assert written == ["class_1.B_next.json", "class_2.A_next.json", "class_7.B_next.json"]


def test_unknown_name(portal, config_file, tmp_path):
    args = make_args(config_file, tmp_path, "--kind", "class", "--which", "actual", "--name", "9.Z")
    assert asyncio.run(run_extraction(args, transport=portal.transport)) == 1


def test_main_reports_config_error(tmp_path):
    assert asyncio.run(main(["--kind", "class", "--output", str(tmp_path / "x.json")])) == 1


def test_main_reports_login_error(config_file):
    with patch("bakalari_timetable.main.run_extraction", new=AsyncMock(side_effect=LoginFailedError(SimpleNamespace(status_code=200)))):
        assert asyncio.run(main(["--config", str(config_file)])) == 1


def test_with_retries_retries_transport_errors():
    func = AsyncMock(side_effect=[RequestTransportError("boom"), RequestTransportError("boom"), "ok"])

    with patch("asyncio.sleep", new=AsyncMock()):
        assert asyncio.run(with_retries(func, 2)()) == "ok"
    assert func.await_count == 3


def test_with_retries_does_not_retry_login_failures():
    func = AsyncMock(side_effect=LoginFailedError(SimpleNamespace(status_code=200)))

    with patch("asyncio.sleep", new=AsyncMock()):
        with pytest.raises(LoginFailedError):
            asyncio.run(with_retries(func, 3)())
    assert func.await_count == 1


def test_without_retries_function_is_unchanged():
    func = AsyncMock()
    assert with_retries(func, 0) is func
