"""Terminal driver behaviour, with the clock, sleep and console stubbed out."""

from __future__ import annotations

from pathlib import Path

import pytest
from loguru import logger

import lifegrid.cli as cli
import lifegrid.grid as grid_module
from lifegrid import NotInitializedError

real_wait_ms = cli.wait_ms


@pytest.fixture(autouse=True)
def isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Run from an empty directory and record waits instead of sleeping."""
    monkeypatch.chdir(tmp_path)
    waits: list[int] = []

    def fake_wait(ms: int) -> bool:
        waits.append(ms)
        return True

    monkeypatch.setattr(cli, "wait_ms", fake_wait)
    monkeypatch.setattr(cli, "clear_console", lambda: None)
    yield waits

    # main() points loguru at the captured stderr; detach it again
    logger.remove()
    logger.disable("lifegrid")


def boards(output: str, rows: int) -> list[list[str]]:
    lines = output.splitlines()
    return [lines[i : i + rows] for i in range(0, len(lines), rows)]


def test_run_prints_each_generation(capsys: pytest.CaptureFixture[str], isolated: list[int]) -> None:
    code = cli.main(["run", "--rows", "4", "--cols", "6", "--seed", "1", "-g", "3", "--interval-ms", "25"])

    out = capsys.readouterr().out
    printed = boards(out, 4)
    assert code == cli.EXIT_SUCCESS
    assert len(printed) == 4
    assert all(len(line) == 6 and set(line) <= {"X", " "} for board in printed for line in board)
    assert isolated == [25, 25, 25]


def test_run_is_reproducible_with_seed(capsys: pytest.CaptureFixture[str]) -> None:
    cli.main(["run", "--rows", "5", "--cols", "5", "--seed", "9", "-g", "2", "--alive", "#", "--dead", "."])
    first = capsys.readouterr().out
    cli.main(["run", "--rows", "5", "--cols", "5", "--seed", "9", "-g", "2", "--alive", "#", "--dead", "."])
    second = capsys.readouterr().out

    assert first == second
    assert set(first) <= {"#", ".", "\n"}


def test_interrupted_wait_stops_loop(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    calls = []

    def wait(ms: int) -> bool:
        calls.append(ms)
        return len(calls) < 3

    monkeypatch.setattr(cli, "wait_ms", wait)

    code = cli.main(["run", "--rows", "2", "--cols", "3", "--seed", "0"])

    assert code == cli.EXIT_SUCCESS
    assert len(boards(capsys.readouterr().out, 2)) == 3


def test_clears_between_generations(monkeypatch: pytest.MonkeyPatch) -> None:
    clears = []
    monkeypatch.setattr(cli, "clear_console", lambda: clears.append(1))

    cli.main(["run", "--rows", "2", "--cols", "2", "--seed", "0", "-g", "2"])
    assert len(clears) == 2

    cli.main(["run", "--rows", "2", "--cols", "2", "--seed", "0", "-g", "2", "--no-clear"])
    assert len(clears) == 2


def test_config_file_is_used(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "lifegrid.toml").write_text('[board]\nrows = 3\ncols = 2\nseed = 4\n[display]\ndead = "-"\n')

    cli.main(["run", "-g", "0"])

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 3
    assert all(len(line) == 2 for line in lines)


def test_no_command_runs_driver(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(cli, "wait_ms", lambda ms: False)

    assert cli.main([]) == cli.EXIT_SUCCESS
    assert len(capsys.readouterr().out.splitlines()) == 30


def test_run_options_without_command(capsys: pytest.CaptureFixture[str]) -> None:
    code = cli.main(["--log-level", "warning", "--rows", "2", "--cols", "3", "--seed", "1", "-g", "0"])

    lines = capsys.readouterr().out.splitlines()
    assert code == cli.EXIT_SUCCESS
    assert len(lines) == 2
    assert all(len(line) == 3 for line in lines)


@pytest.mark.parametrize(
    "argv, expected",
    [
        ([], ["run"]),
        (["--rows", "5"], ["run", "--rows", "5"]),
        (["-c", "a.toml", "-g", "1"], ["-c", "a.toml", "run", "-g", "1"]),
        (["--config=a.toml", "--log-level", "debug"], ["--config=a.toml", "--log-level", "debug", "run"]),
        (["verify", "--rows", "5"], ["verify", "--rows", "5"]),
        (["--help"], ["--help"]),
    ],
)
def test_default_to_run(argv: list[str], expected: list[str]) -> None:
    assert cli.default_to_run(argv) == expected


@pytest.mark.parametrize("stage", ["advance", "clear_console"])
def test_ctrl_c_outside_wait_stops_cleanly(monkeypatch: pytest.MonkeyPatch, stage: str) -> None:
    destroyed = []
    original = grid_module.Grid.destroy

    def interrupt(*args) -> None:
        raise KeyboardInterrupt

    def tracking_destroy(self):
        destroyed.append((self.rows, self.cols))
        original(self)

    monkeypatch.setattr(cli, stage, interrupt)
    monkeypatch.setattr(grid_module.Grid, "destroy", tracking_destroy)

    code = cli.main(["run", "--rows", "3", "--cols", "3", "--seed", "1"])

    assert code == cli.EXIT_SUCCESS
    assert destroyed[-1] == (3, 3)


def test_create_failure_exits_nonzero(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    def fail(size: int):
        raise MemoryError

    monkeypatch.setattr(grid_module, "_allocate", fail)

    assert cli.main(["run", "-g", "1"]) == cli.EXIT_FAILURE
    assert capsys.readouterr().out == ""


def test_render_failure_exits_nonzero(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_render(self, alive="X", dead="O"):
        raise NotInitializedError("render")

    monkeypatch.setattr(grid_module.Grid, "render", broken_render)

    assert cli.main(["run", "--seed", "1", "-g", "1"]) == cli.EXIT_FAILURE


def test_grid_destroyed_on_exit(monkeypatch: pytest.MonkeyPatch) -> None:
    destroyed = []
    original = grid_module.Grid.destroy

    def tracking_destroy(self):
        destroyed.append((self.rows, self.cols))
        original(self)

    monkeypatch.setattr(grid_module.Grid, "destroy", tracking_destroy)

    cli.main(["run", "--rows", "3", "--cols", "4", "--seed", "1", "-g", "1"])

    # one snapshot from the single advance, then the grid itself
    assert destroyed == [(3, 4), (3, 4)]


@pytest.mark.parametrize(
    "argv",
    [
        ["run", "--alive", "XY"],
        ["run", "--rows", "-1"],
        ["run", "-g", "-2"],
        ["verify", "--rows", "-1"],
        ["verify", "--cols", "-3"],
        ["verify", "-g", "-1"],
    ],
)
def test_invalid_option_exits_with_usage_error(argv: list[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(argv)
    assert exc_info.value.code == 2


def test_verify_command(capsys: pytest.CaptureFixture[str]) -> None:
    code = cli.main(["verify", "--rows", "10", "--cols", "12", "-g", "5", "--seed", "3"])

    out = capsys.readouterr().out
    assert code == cli.EXIT_SUCCESS
    assert "Simulator matches reference" in out


def test_wait_ms_reports_interrupt(monkeypatch: pytest.MonkeyPatch) -> None:
    def interrupted(seconds: float) -> None:
        raise KeyboardInterrupt

    monkeypatch.setattr(cli.time, "sleep", interrupted)

    assert real_wait_ms(10) is False


def test_wait_ms_sleeps_in_seconds(monkeypatch: pytest.MonkeyPatch) -> None:
    slept = []
    monkeypatch.setattr(cli.time, "sleep", slept.append)

    assert real_wait_ms(250) is True
    assert slept == [0.25]


def test_clock_seed_in_range() -> None:
    assert 0 <= cli.clock_seed() < 2**32
