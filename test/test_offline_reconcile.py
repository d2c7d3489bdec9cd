"""Tests for the initpose_offline command-line tool."""

import json

from carto_initpose.tools.offline_reconcile import EXIT_RECONCILE_ERROR, main


class TestOfflineReconcile:

    def test_text_output(self, example_snapshot_path, capsys):
        assert main(["--snapshot", example_snapshot_path, "--x", "2", "--y", "3"]) == 0
        out = capsys.readouterr().out
        assert "Nearest submap:         (0, 1)" in out
        assert "xyz=(2.0000, 3.0000, 7.0000)" in out

    def test_json_output(self, example_snapshot_path, capsys):
        assert main(["--snapshot", example_snapshot_path, "--x", "4.9", "--y", "5.2", "--yaw", "0.5", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["nearest_submap"] == [0, 2]
        assert data["relative"]["position"]["z"] == 2.0
        assert data["reference_trajectory_id"] == 0

    def test_empty_map_exit_code(self, tmp_path, capsys):
        path = tmp_path / "empty.yaml"
        path.write_text("submaps: []\ntrajectory_origins:\n  0: {}\n")
        assert main(["--snapshot", str(path), "--x", "0", "--y", "0"]) == EXIT_RECONCILE_ERROR
        assert "no submaps" in capsys.readouterr().err

    def test_missing_reference_exit_code(self, example_snapshot_path, capsys):
        code = main([
            "--snapshot", example_snapshot_path, "--x", "0", "--y", "0",
            "--reference-trajectory-id", "3",
        ])
        assert code == EXIT_RECONCILE_ERROR
        assert "trajectory 3" in capsys.readouterr().err
