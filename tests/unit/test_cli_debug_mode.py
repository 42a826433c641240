from __future__ import annotations

from pathlib import Path

from fleet_ingest.cli.__main__ import main as cli_main

"""--debug フラグで DEBUG 行が出力されることの確認"""


def test_cli_debug_mode_emits_debug_lines(temp_workdir: Path, capsys):
    f = temp_workdir / "data" / "p.csv"
    f.write_text("name,vehicle_type\nBob,bike\n", encoding="utf-8")

    code = cli_main(["--debug", str(f)])
    out = capsys.readouterr().out

    assert code == 0
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG parsing p.csv as csv" in out
    assert "DEBUG headers found: ['name', 'vehicle_type']" in out


def test_cli_without_debug_hides_debug_lines(temp_workdir: Path, capsys):
    f = temp_workdir / "data" / "p.csv"
    f.write_text("name,vehicle_type\nBob,bike\n", encoding="utf-8")

    cli_main([str(f)])
    assert "DEBUG" not in capsys.readouterr().out
