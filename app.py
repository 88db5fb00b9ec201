import os
import random
from functools import wraps

import click
from dotenv import load_dotenv
from flask import Flask, jsonify, request, session
from werkzeug.exceptions import BadRequest, Forbidden, HTTPException, InternalServerError, NotFound, UnprocessableEntity

from board import Board, SaveFileError
from sudoku_generator import MAX_REMOVAL_ATTEMPTS, Difficulty, generate, is_empty_grid

load_dotenv()

app = Flask(__name__)
app.secret_key = os.getenv("FLASK_SECRET_KEY", "dev-secret")

# Game config
SAVE_PATH = os.getenv("SUDOKU_SAVE_PATH", os.path.join(os.path.dirname(__file__), "saved_game.txt"))
MAX_ATTEMPTS = int(os.getenv("SUDOKU_MAX_REMOVAL_ATTEMPTS", str(MAX_REMOVAL_ATTEMPTS)))
DEFAULT_LEVEL = os.getenv("SUDOKU_DEFAULT_LEVEL", Difficulty.EASY.value)

app.config.update(SAVE_PATH=SAVE_PATH, MAX_REMOVAL_ATTEMPTS=MAX_ATTEMPTS, DEFAULT_LEVEL=DEFAULT_LEVEL)


def parse_level(text: str | None) -> Difficulty:
    try:
        return Difficulty.parse(text or app.config["DEFAULT_LEVEL"])
    except ValueError:
        return Difficulty.parse(app.config["DEFAULT_LEVEL"])


def current_board() -> Board:
    return Board.from_dict(session["board"])


def store_board(board: Board):
    session["board"] = board.to_dict()


def board_payload(board: Board) -> dict:
    return {
        "puzzle": board.initial_grid(),
        "board": board.current_grid(),
        "fixed": board.fixed_mask(),
        "solved": board.is_solved(),
    }


def game_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "board" not in session:
            raise NotFound("No game in progress. Request a new puzzle first.")
        return view(*args, **kwargs)
    return wrapper


def _int_field(data: dict, name: str, low: int, high: int) -> int:
    value = data.get(name)
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise BadRequest(f"'{name}' must be an integer between {low} and {high}.")
    return value


@app.errorhandler(HTTPException)
def handle_http_error(e: HTTPException):
    return jsonify({"error": e.description}), e.code


@app.route("/")
def index():
    return jsonify({"message": "Sudoku backend is running!"})


@app.route("/api/new_puzzle")
def api_new_puzzle():
    level = parse_level(request.args.get("level", "").lower())
    puzzle = generate(level, max_attempts=app.config["MAX_REMOVAL_ATTEMPTS"])
    if is_empty_grid(puzzle):
        app.logger.error("Generator returned an empty grid for level %s", level.value)
        raise InternalServerError("Could not generate a puzzle. Please try again.")

    board = Board.from_puzzle(puzzle)
    store_board(board)
    clues = sum(1 for row in puzzle for v in row if v)
    app.logger.info("New %s puzzle with %d clues", level.value, clues)
    return jsonify({"level": level.value, "puzzle": puzzle, "fixed": board.fixed_mask(), "clues": clues})


@app.route("/api/board")
@game_required
def api_board():
    return jsonify(board_payload(current_board()))


@app.route("/api/move", methods=["POST"])
@game_required
def api_move():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest("Expected a JSON object with row, col and value.")
    row = _int_field(data, "row", 0, 8)
    col = _int_field(data, "col", 0, 8)
    value = _int_field(data, "value", 0, 9)

    board = current_board()
    if board.is_cell_fixed(row, col):
        raise Forbidden(f"Cell ({row}, {col}) is part of the puzzle and cannot be changed.")

    valid = board.is_valid_move(row, col, value)
    if valid:
        board.set_cell_value(row, col, value)
        store_board(board)
    payload = board_payload(board)
    payload["valid"] = valid
    if payload["solved"]:
        app.logger.info("Puzzle solved")
    return jsonify(payload)


@app.route("/api/save", methods=["POST"])
@game_required
def api_save():
    path = app.config["SAVE_PATH"]
    try:
        current_board().save_game(path)
    except OSError as e:
        app.logger.error("Error saving game to %s: %s", path, e)
        raise InternalServerError("Error saving game.")
    return jsonify({"message": "Game saved successfully!"})


@app.route("/api/load", methods=["POST"])
def api_load():
    path = app.config["SAVE_PATH"]
    board = Board()
    try:
        board.load_game(path)
    except FileNotFoundError:
        raise NotFound("No saved game found.")
    except SaveFileError as e:
        app.logger.warning("Corrupt save file %s: %s", path, e)
        raise UnprocessableEntity(f"Error loading game: {e}")
    except OSError as e:
        app.logger.error("Error loading game from %s: %s", path, e)
        raise InternalServerError("Error loading game.")
    store_board(board)
    return jsonify({"message": "Game loaded successfully!", **board_payload(board)})


@app.cli.command("generate")
@click.option("--level", type=click.Choice([d.value for d in Difficulty], case_sensitive=False),
              default=DEFAULT_LEVEL, show_default=True)
@click.option("--seed", type=int, default=None, help="Seed for a reproducible puzzle.")
def generate_command(level, seed):
    """Print a new puzzle as comma-separated rows."""
    rng = random.Random(seed) if seed is not None else None
    puzzle = generate(Difficulty.parse(level), rng, app.config["MAX_REMOVAL_ATTEMPTS"])
    if is_empty_grid(puzzle):
        raise click.ClickException("Could not generate a puzzle.")
    for row in puzzle:
        click.echo(",".join(str(v) for v in row))


if __name__ == "__main__":
    app.run(debug=True)
