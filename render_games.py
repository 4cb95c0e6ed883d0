"""
Render recorded 2048 games.
Turns JSON game logs written by play_2048.py into animated GIFs of the
board and plots of the score over the course of each game.
"""

import io
import json
import os
from pathlib import Path

import matplotlib.patches as mpatches
import matplotlib.pyplot as plt
import numpy as np
from PIL import Image


# Color scheme for tiles (similar to the original 2048 game)
TILE_COLORS = {
    0: '#CDC1B4',      # Empty
    2: '#EEE4DA',
    4: '#EDE0C8',
    8: '#F2B179',
    16: '#F59563',
    32: '#F67C5F',
    64: '#F65E3B',
    128: '#EDCF72',
    256: '#EDCC61',
    512: '#EDC850',
    1024: '#EDC53F',
    2048: '#EDC22E',
}
SUPER_TILE_COLOR = '#3C3A32'

DARK_TEXT_COLOR = '#776E65'
LIGHT_TEXT_COLOR = '#F9F6F2'
BACKGROUND_COLOR = '#FAF8EF'
BORDER_COLOR = '#BBADA0'

# a log that cannot be read or does not have the expected entries
LOG_ERRORS = (OSError, ValueError, TypeError, AttributeError, KeyError)


def get_tile_color(value):
    """Get the color for a tile value."""
    return TILE_COLORS.get(value, SUPER_TILE_COLOR)


def get_text_color(value):
    """Get the text color for a tile value."""
    if value == 0:
        return TILE_COLORS[0]
    return DARK_TEXT_COLOR if value <= 4 else LIGHT_TEXT_COLOR


def render_game_state(game_state, score, move_num, action, ax):
    """Draw one board with its move number, action and score on `ax`."""
    size = len(game_state)
    ax.clear()
    ax.set_xlim(0, size)
    ax.set_ylim(0, size)
    ax.set_aspect('equal')
    ax.axis('off')

    for i, row in enumerate(game_state):
        for j, value in enumerate(row):
            # Row 0 is drawn at the top
            y = size - 1 - i
            ax.add_patch(mpatches.Rectangle((j, y), 1, 1,
                                            facecolor=get_tile_color(value),
                                            edgecolor=BORDER_COLOR,
                                            linewidth=3))
            if value != 0:
                fontsize = 40 if value < 100 else (32 if value < 1000 else 24)
                ax.text(j + 0.5, y + 0.5, str(value),
                        ha='center', va='center',
                        fontsize=fontsize, fontweight='bold',
                        color=get_text_color(value))

    ax.text(size / 2, -0.3, f"Move: {move_num} | Action: {action} | Score: {score}",
            ha='center', va='top', fontsize=14, fontweight='bold', color=DARK_TEXT_COLOR)


def load_game_states(log_file):
    """Load every logged board from a game log, skipping the final stats entry."""
    with open(log_file, 'r') as f:
        data = json.load(f)

    states = []
    for i, entry in enumerate(data):
        if 'game_state' not in entry:
            continue
        states.append({
            'state': entry['game_state'],
            'score': entry.get('current_score', 0),
            'action': entry.get('action', 'UNKNOWN'),
            'move_num': i,
            'invalid': entry.get('invalid_move', False),
        })
    return states


def _figure_to_image(fig):
    buf = io.BytesIO()
    # fixed canvas so every frame has the same size
    fig.savefig(buf, format='png', dpi=100, facecolor=BACKGROUND_COLOR, edgecolor='none')
    buf.seek(0)
    image = Image.open(buf).copy()
    buf.close()
    return image


def create_gif(log_file, output_file, fps=2, max_frames=None):
    """
    Create an animated GIF from a game log.

    Args:
        log_file: JSON game log
        output_file: Path of the GIF to write
        fps: Frames per second
        max_frames: Sample this many evenly spaced frames if the game is longer

    Returns:
        The output path, or None if the log holds no boards
    """
    states = load_game_states(log_file)
    if not states:
        return None

    if max_frames and len(states) > max_frames:
        indices = np.linspace(0, len(states) - 1, max_frames, dtype=int)
        states = [states[i] for i in indices]

    fig, ax = plt.subplots(figsize=(6, 6.5))
    frames = []
    try:
        for info in states:
            render_game_state(info['state'], info['score'], info['move_num'], info['action'], ax)
            frames.append(_figure_to_image(fig))
    finally:
        plt.close(fig)

    directory = os.path.dirname(str(output_file))
    if directory:
        os.makedirs(directory, exist_ok=True)

    frames[0].save(
        output_file,
        save_all=True,
        append_images=frames[1:],
        duration=int(1000 / fps),
        loop=0,
    )
    return output_file


def load_scores(log_file):
    """Return (move numbers, scores) for the accepted moves of a game log."""
    moves, scores = [], []
    for info in load_game_states(log_file):
        if info['invalid']:
            continue
        moves.append(info['move_num'])
        scores.append(info['score'])
    return moves, scores


def plot_scores(log_files, output_file='scores_per_turn.png'):
    """Plot the score progression of every readable game log on one chart."""
    fig, ax = plt.subplots(figsize=(14, 8))
    plotted = 0
    for log_file in log_files:
        try:
            moves, scores = load_scores(log_file)
        except LOG_ERRORS as e:
            print(f"  ✗ Error loading {Path(log_file).name}: {e}")
            continue
        ax.plot(moves, scores, marker='o', markersize=2, linewidth=1.5,
                label=Path(log_file).stem, alpha=0.8)
        plotted += 1

    ax.set_xlabel('Move Number', fontsize=12)
    ax.set_ylabel('Score', fontsize=12)
    ax.set_title('2048 Score Progression', fontsize=14, fontweight='bold')
    if plotted:
        ax.legend(bbox_to_anchor=(1.05, 1), loc='upper left', fontsize=9)
    ax.grid(True, alpha=0.3)

    fig.tight_layout()
    fig.savefig(output_file, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return output_file


def render_all(log_dir='game_logs', output_dir='gifs', fps=2, max_frames=None, plot=False):
    """Create a GIF for every game log in `log_dir`, and optionally a score plot."""
    log_files = sorted(Path(log_dir).glob('game_log_*.json'))
    if not log_files:
        print(f"No game logs found in {log_dir}")
        return []

    print(f"Found {len(log_files)} game logs")
    os.makedirs(output_dir, exist_ok=True)
    written = []
    for log_file in log_files:
        output_file = os.path.join(output_dir, f'{log_file.stem.replace("game_log_", "game_")}.gif')
        try:
            result = create_gif(log_file, output_file, fps, max_frames)
        except LOG_ERRORS as e:
            print(f"  ✗ Error creating GIF for {log_file.name}: {e}")
            continue
        if result is None:
            print(f"  No states found in {log_file.name}")
            continue
        print(f"  ✓ Saved {result}")
        written.append(result)

    if plot:
        plot_file = plot_scores(log_files, os.path.join(output_dir, 'scores_per_turn.png'))
        print(f"  ✓ Saved {plot_file}")
        written.append(plot_file)

    return written


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description='Create animated GIFs of recorded 2048 games')
    parser.add_argument('--log_dir', type=str, default='game_logs',
                        help='Directory containing game log JSON files')
    parser.add_argument('--output_dir', type=str, default='gifs',
                        help='Directory to save GIFs and plots')
    parser.add_argument('--fps', type=int, default=2,
                        help='Frames per second for GIF animation')
    parser.add_argument('--max_frames', type=int, default=None,
                        help='Maximum number of frames per GIF (samples evenly if exceeded)')
    parser.add_argument('--plot', action='store_true',
                        help='Also plot the score progression of all games')

    args = parser.parse_args()
    render_all(args.log_dir, args.output_dir, args.fps, args.max_frames, args.plot)
