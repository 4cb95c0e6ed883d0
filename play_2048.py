"""
Terminal 2048 Player
Owns the game state (grid and score), reads moves from the keyboard or a
scripted key sequence, keeps the best score and logs every move to JSON.
"""

import argparse
import json
import os
import random
from typing import Callable, Iterable, NamedTuple, Optional

from game_2048 import (
    WIN_TILE,
    Direction,
    Grid,
    add_random_tile,
    display,
    has_won,
    init_grid,
    is_terminal,
    max_tile,
    resolve_move,
)


MIN_SWIPE_DISTANCE = 30

KEY_MAP = {
    'ArrowUp': Direction.UP,
    'w': Direction.UP, 'W': Direction.UP,
    'ArrowDown': Direction.DOWN,
    's': Direction.DOWN, 'S': Direction.DOWN,
    'ArrowLeft': Direction.LEFT,
    'a': Direction.LEFT, 'A': Direction.LEFT,
    'ArrowRight': Direction.RIGHT,
    'd': Direction.RIGHT, 'D': Direction.RIGHT,
}

QUIT_KEYS = ('q', 'Q', 'quit')


def direction_from_key(key: str) -> Optional[Direction]:
    """Map a key name (wasd, arrow key or direction word) to a Direction."""
    if key in KEY_MAP:
        return KEY_MAP[key]
    try:
        return Direction(key.strip().lower())
    except ValueError:
        return None


def swipe_direction(delta_x: float, delta_y: float, min_distance: float = MIN_SWIPE_DISTANCE) -> Optional[Direction]:
    """
    Classify a swipe by its dominant axis.

    Args:
        delta_x: Horizontal travel, positive to the right
        delta_y: Vertical travel, positive downwards
        min_distance: Shortest travel along the dominant axis that counts

    Returns:
        Direction of the swipe, or None if it was too short
    """
    if abs(delta_x) > abs(delta_y):
        if abs(delta_x) > min_distance:
            return Direction.RIGHT if delta_x > 0 else Direction.LEFT
    elif abs(delta_y) > min_distance:
        return Direction.DOWN if delta_y > 0 else Direction.UP
    return None


class BestScoreStore:
    """Best score kept in a small JSON file across sessions."""

    def __init__(self, path: str = 'best_score.json'):
        self.path = path

    def get(self) -> int:
        if not os.path.exists(self.path):
            return 0
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
            return int(data.get('best_score', 0))
        except (ValueError, TypeError, AttributeError) as e:
            # unreadable best score counts as no best score
            print(f"⚠️  Ignoring unreadable best score file {self.path}: {e}")
            return 0

    def set(self, score: int) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump({'best_score': score}, f, indent=2)

    def update(self, score: int) -> int:
        """Store `score` if it beats the stored best; return the best."""
        best = self.get()
        if score > best:
            self.set(score)
            return score
        return best


class TurnResult(NamedTuple):
    grid: Grid
    score: int
    moved: bool
    score_gained: int
    game_over: bool


def play_turn(grid: Grid, score: int, direction: Direction, rng: random.Random) -> TurnResult:
    """
    Apply one move to the game state.

    A move that changes the grid adds its merge score, spawns a new tile and
    checks for game over. A move that changes nothing returns the state as is.
    """
    outcome = resolve_move(grid, direction)
    if not outcome.moved:
        return TurnResult(grid, score, False, 0, is_terminal(grid))

    new_grid = add_random_tile(outcome.grid, rng)
    return TurnResult(new_grid, score + outcome.score_gained, True, outcome.score_gained, is_terminal(new_grid))


def keyboard_moves(grid: Grid, score: int) -> Optional[str]:
    """Read the next move from standard input."""
    print()
    print(display(grid, score))
    return input("\nEnter move (w/a/s/d, q to quit): ").strip()


def scripted_moves(keys: Iterable[str]) -> Callable[[Grid, int], Optional[str]]:
    """Build a move reader that replays `keys` and then quits."""
    remaining = iter(keys)

    def read_move(grid: Grid, score: int) -> Optional[str]:
        return next(remaining, None)

    return read_move


def _write_log(log_file: Optional[str], game_log: list) -> None:
    if not log_file:
        return
    directory = os.path.dirname(log_file)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(log_file, 'w') as f:
        json.dump(game_log, f, indent=2)


def play_game(read_move=keyboard_moves, rng=None, log_file=None, best_score_store=None, max_moves=10000, max_consecutive_invalid_moves=None):
    """
    Play a full game of 2048 and log all moves.

    Args:
        read_move: Callable (grid, score) -> key string, or None to quit
        rng: Random source for tile placement
        log_file: Path to the JSON log file, or None to skip logging
        best_score_store: BestScoreStore to update at the end, or None
        max_moves: Maximum number of accepted moves
        max_consecutive_invalid_moves: Stop after this many moves in a row
            that change nothing (None means never)

    Returns:
        Final score
    """
    if rng is None:
        rng = random.Random()

    current_state = init_grid(rng)
    score = 0
    move_count = 0
    consecutive_invalid_moves = 0
    announced_win = False
    game_end_reason = "unknown"

    game_log = [{
        "game_state": [row[:] for row in current_state],
        "action": "INITIAL",
        "current_score": score,
        "score_gained": 0,
    }]
    _write_log(log_file, game_log)

    while not is_terminal(current_state) and move_count < max_moves:
        key = read_move(current_state, score)
        if key is None or key in QUIT_KEYS:
            game_end_reason = "player_quit"
            break

        direction = direction_from_key(key)
        if direction is None:
            print(f"⚠️  Unknown command {key!r}. Use w/a/s/d to move or q to quit.")
            continue

        turn = play_turn(current_state, score, direction, rng)

        if not turn.moved:
            consecutive_invalid_moves += 1
            print(f"⚠️  Invalid move {direction.value.upper()}! Nothing can move that way.")
            game_log.append({
                "game_state": [row[:] for row in current_state],
                "action": direction.value.upper(),
                "current_score": score,
                "score_gained": 0,
                "invalid_move": True,
            })
            _write_log(log_file, game_log)
            if max_consecutive_invalid_moves is not None and consecutive_invalid_moves >= max_consecutive_invalid_moves:
                print(f"\n❌ Too many consecutive invalid moves ({max_consecutive_invalid_moves}). Game stopped.")
                game_end_reason = f"too_many_invalid_moves_{max_consecutive_invalid_moves}"
                break
            continue

        consecutive_invalid_moves = 0
        current_state = turn.grid
        score = turn.score
        move_count += 1

        game_log.append({
            "game_state": [row[:] for row in current_state],
            "action": direction.value.upper(),
            "current_score": score,
            "score_gained": turn.score_gained,
        })
        _write_log(log_file, game_log)

        if not announced_win and has_won(current_state):
            announced_win = True
            print(f"\n🎉 You reached {WIN_TILE}! Keep going for a higher score.")

    if game_end_reason == "unknown":
        if is_terminal(current_state):
            game_end_reason = "no_moves_available"
        elif move_count >= max_moves:
            game_end_reason = "max_moves_reached"

    best_score = best_score_store.update(score) if best_score_store is not None else score

    print("\n" + "=" * 50)
    print(display(current_state))
    if game_end_reason == "no_moves_available":
        print("Game Over!")
    elif game_end_reason == "max_moves_reached":
        print("Maximum moves reached!")
    else:
        print("Game stopped.")
    print("=" * 50)
    print(f"Final Score: {score}")
    print(f"Best Score: {best_score}")
    print(f"Total Moves: {move_count}")
    print(f"Game End Reason: {game_end_reason}")
    if log_file:
        print(f"Game log saved to: {log_file}")

    game_log.append({
        "final_score": score,
        "best_score": best_score,
        "game_end_reason": game_end_reason,
        "total_moves": move_count,
        "max_tile": max_tile(current_state),
        "won": has_won(current_state),
    })
    _write_log(log_file, game_log)

    return score


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Play 2048 in the terminal')
    parser.add_argument('--seed', type=int, default=None, help='Random seed for tile placement')
    parser.add_argument('--log_file', type=str, default='game_logs/game_log_player.json', help='Path to the JSON game log')
    parser.add_argument('--best_score_file', type=str, default='best_score.json', help='Where the best score is kept')
    parser.add_argument('--moves', type=str, default=None, help='Play a scripted key sequence (e.g. "wasd") instead of reading the keyboard')
    parser.add_argument('--max_moves', type=int, default=10000, help='Maximum number of moves (default: 10000)')

    args = parser.parse_args()

    print("Welcome to 2048!")
    print("Commands: w (up), s (down), a (left), d (right), q (quit)")

    play_game(
        read_move=scripted_moves(args.moves) if args.moves else keyboard_moves,
        rng=random.Random(args.seed),
        log_file=args.log_file,
        best_score_store=BestScoreStore(args.best_score_file),
        max_moves=args.max_moves,
    )
