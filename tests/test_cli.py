import logging

import pytest

from mathdoku import storage
from mathdoku.board import format_board, is_latin_square
from mathdoku.cli import main, build_parser


@pytest.fixture(autouse=True)
def restore_logging():
    # main() replaces the root handlers
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(scope="module")
def run(tmp_path_factory):
    """One small generate run shared by the tests below."""
    handlers = logging.getLogger().handlers[:]
    root = tmp_path_factory.mktemp("run")
    cagings_dir = str(root / "cagings")
    solution_file = str(root / "solution.json")
    code = main([
        "generate", "3", "--count", "2", "--seed", "5", "--shuffle-rounds", "10",
        "--cagings-dir", cagings_dir, "--solution-file", solution_file,
    ])
    logging.getLogger().handlers[:] = handlers
    assert code == 0
    return root, cagings_dir, solution_file


class TestGenerate:

    def test_outputs(self, run):
        _, cagings_dir, solution_file = run
        assert is_latin_square(storage.load_solution(solution_file))
        cagings = storage.list_cagings(cagings_dir)
        assert len(cagings) == 2
        assert all(c["max"] == 3 for c in cagings)
        if cagings[0]["rounds"] == cagings[1]["rounds"]:
            assert [c["index"] for c in cagings] == [1, 2]

    def test_bad_size(self):
        with pytest.raises(SystemExit):
            main(["generate", "0"])


class TestOtherCommands:

    def test_solve(self, run, capsys):
        _, cagings_dir, _ = run
        path = storage.list_cagings(cagings_dir)[0]["path"]
        assert main(["solve", path]) == 0
        assert "Status: solved" in capsys.readouterr().out

    def test_render(self, run):
        root, cagings_dir, solution_file = run
        path = storage.list_cagings(cagings_dir)[0]["path"]
        out = str(root / "puzzle.html")
        assert main(["render", path, "--solution-file", solution_file, "--out", out]) == 0
        with open(out, encoding="utf-8") as f:
            assert "<table>" in f.read()

    def test_book(self, run):
        root, cagings_dir, solution_file = run
        paths = [c["path"] for c in storage.list_cagings(cagings_dir)]
        out = str(root / "book.pdf")
        assert main(["book", *paths, "--solution-file", solution_file, "--out", out, "--per-page", "2"]) == 0
        with open(out, "rb") as f:
            assert f.read(4) == b"%PDF"

    def test_show_solution(self, run, capsys):
        _, _, solution_file = run
        assert main(["show-solution", "--solution-file", solution_file]) == 0
        board = storage.load_solution(solution_file)
        assert capsys.readouterr().out.strip() == format_board(board)

    def test_missing_puzzle(self, tmp_path):
        assert main(["solve", str(tmp_path / "missing.json")]) == 1

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestSolutionFileOption:

    def test_render_without_solution(self, run, tmp_path, monkeypatch):
        _, cagings_dir, _ = run
        path = storage.list_cagings(cagings_dir)[0]["path"]
        monkeypatch.chdir(tmp_path)
        out = str(tmp_path / "puzzle.html")
        assert main(["render", path, "--out", out]) == 0
        with open(out, encoding="utf-8") as f:
            html = f.read()
        assert "<table>" in html
        assert "class=value" not in html

    def test_book_without_solution(self, run, tmp_path, monkeypatch):
        _, cagings_dir, _ = run
        path = storage.list_cagings(cagings_dir)[0]["path"]
        monkeypatch.chdir(tmp_path)
        out = str(tmp_path / "book.pdf")
        assert main(["book", path, "--out", out]) == 0
        with open(out, "rb") as f:
            assert f.read(4) == b"%PDF"

    def test_solution_of_other_size(self, run, tmp_path):
        _, cagings_dir, _ = run
        path = storage.list_cagings(cagings_dir)[0]["path"]
        small_solution = str(tmp_path / "small.json")
        storage.save_solution([[1]], small_solution)
        out = str(tmp_path / "out")
        assert main(["render", path, "--solution-file", small_solution, "--out", out]) == 1
        assert main(["book", path, "--solution-file", small_solution, "--out", out]) == 1
