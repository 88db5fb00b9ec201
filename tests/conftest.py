import pytest

from app import app as flask_app

SOLVED = [
    [5, 3, 4, 6, 7, 8, 9, 1, 2],
    [6, 7, 2, 1, 9, 5, 3, 4, 8],
    [1, 9, 8, 3, 4, 2, 5, 6, 7],
    [8, 5, 9, 7, 6, 1, 4, 2, 3],
    [4, 2, 6, 8, 5, 3, 7, 9, 1],
    [7, 1, 3, 9, 2, 4, 8, 5, 6],
    [9, 6, 1, 5, 3, 7, 2, 8, 4],
    [2, 8, 7, 4, 1, 9, 6, 3, 5],
    [3, 4, 5, 2, 8, 6, 1, 7, 9],
]

# Rows 3-4, columns 5 and 8 hold 1 and 3 crosswise; clearing all four lets
# the two digits swap, giving two solutions.
RECTANGLE = [(3, 5), (3, 8), (4, 5), (4, 8)]


@pytest.fixture
def solved():
    return [row[:] for row in SOLVED]


@pytest.fixture
def app(tmp_path):
    flask_app.config.update(
        TESTING=True,
        SAVE_PATH=str(tmp_path / "saved_game.txt"),
        MAX_REMOVAL_ATTEMPTS=20000,
        DEFAULT_LEVEL="easy",
    )
    yield flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def rectangle():
    return list(RECTANGLE)
