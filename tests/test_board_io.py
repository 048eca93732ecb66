import pytest

from board_io import (
    BoardFormatError,
    Stage,
    StageLogger,
    StageRecord,
    read_board_csv,
    read_stage_log,
    write_board_csv,
)

BOARD = [[2, 4, 0, 0], [0, 8, 0, 0], [0, 0, 16, 0], [0, 0, 0, 65536]]


class TestReadBoard:

    def test_reads_written_board(self, tmp_path):
        path = tmp_path / "game_input.csv"
        write_board_csv(path, BOARD)
        assert path.read_text() == "2,4,0,0\n0,8,0,0\n0,0,16,0\n0,0,0,65536\n"
        assert read_board_csv(path) == BOARD

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(OSError):
            read_board_csv(tmp_path / "nope.csv")

    def test_short_rows_and_missing_lines_are_empty(self, tmp_path):
        path = tmp_path / "game_input.csv"
        path.write_text("2,2\n4\n")
        assert read_board_csv(path) == [[2, 2, 0, 0], [4, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]]

    def test_extra_rows_and_cells_are_ignored(self, tmp_path):
        path = tmp_path / "game_input.csv"
        path.write_text("2,2,2,2,2\n" * 6)
        assert read_board_csv(path) == [[2, 2, 2, 2]] * 4

    def test_malformed_cells_become_zero(self, tmp_path, caplog):
        path = tmp_path / "game_input.csv"
        path.write_text("2,abc,4,\n3,-2, 8 ,0\r\n1,1,2,1\n")
        with caplog.at_level("WARNING", logger="board_io"):
            board = read_board_csv(path)
        assert board == [[2, 0, 4, 0], [0, 0, 8, 0], [0, 0, 2, 0], [0, 0, 0, 0]]
        assert "not an integer" in caplog.text
        assert "not a valid tile" in caplog.text

    def test_leading_integer_is_kept(self, tmp_path):
        path = tmp_path / "game_input.csv"
        path.write_text("4.0,8 tiles,+2,x4\n")
        assert read_board_csv(path)[0] == [4, 8, 2, 0]

    def test_invalid_utf8_becomes_zero(self, tmp_path):
        path = tmp_path / "game_input.csv"
        path.write_bytes(b"2,2,0,0\n\xff\xfe,0,0,0\n")
        assert read_board_csv(path) == [[2, 2, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]]


class TestStageRecord:

    def test_csv_row(self):
        record = StageRecord.from_board(Stage.MERGE, BOARD)
        assert record.to_csv_row() == "merge,2,4,0,0,0,8,0,0,0,0,16,0,0,0,0,65536"
        assert record.board == BOARD

    def test_from_csv_row(self):
        record = StageRecord.from_csv_row("undo," + ",".join(["0"] * 15) + ",2\n")
        assert record.stage is Stage.UNDO
        assert record.cells[-1] == 2

    @pytest.mark.parametrize("line", [
        "merge,2,2",
        "bogus," + ",".join(["0"] * 16),
        "spawn," + ",".join(["3"] * 16),
        "initial,1,1," + ",".join(["0"] * 14),
        "spawn," + ",".join(["x"] * 16),
    ])
    def test_from_csv_row_rejects(self, line):
        with pytest.raises(BoardFormatError):
            StageRecord.from_csv_row(line)


class TestStageLogger:

    def test_first_record_truncates(self, tmp_path):
        path = tmp_path / "game_output.csv"
        path.write_text("stale line\n")

        logger = StageLogger(path)
        logger.record(Stage.INITIAL, BOARD)
        logger.record(Stage.INVALID, BOARD)

        lines = path.read_text().splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("initial,")
        assert lines[1].startswith("invalid,")

    def test_read_back(self, tmp_path):
        path = tmp_path / "game_output.csv"
        logger = StageLogger(path)
        logger.record(Stage.INITIAL, BOARD)
        logger.record(Stage.SPAWN, BOARD)
        with open(path, "a") as f:
            f.write("\n")

        records = read_stage_log(path)
        assert [r.stage for r in records] == [Stage.INITIAL, Stage.SPAWN]
        assert all(r.board == BOARD for r in records)
