import json

import pytest
from PIL import Image

from render_games import (
    SUPER_TILE_COLOR,
    TILE_COLORS,
    create_gif,
    get_text_color,
    get_tile_color,
    load_game_states,
    load_scores,
    plot_scores,
    render_all,
)


def write_log(path, boards):
    log = []
    score = 0
    for i, board in enumerate(boards):
        log.append({
            "game_state": board,
            "action": "INITIAL" if i == 0 else "LEFT",
            "current_score": score,
            "score_gained": 0,
        })
        score += 4
    log.append({"final_score": score, "game_end_reason": "player_quit", "total_moves": len(boards) - 1})
    with open(path, 'w') as f:
        json.dump(log, f)
    return path


def boards(count):
    result = []
    for i in range(count):
        board = [[0] * 4 for _ in range(4)]
        board[i % 4][(i // 4) % 4] = 2 ** (i % 11 + 1)
        result.append(board)
    return result


class TestColors:
    def test_tile_colors(self):
        assert get_tile_color(0) == TILE_COLORS[0]
        assert get_tile_color(2048) == TILE_COLORS[2048]
        assert get_tile_color(8192) == SUPER_TILE_COLOR

    def test_text_colors(self):
        assert get_text_color(2) == get_text_color(4)
        assert get_text_color(8) != get_text_color(4)
        assert get_text_color(0) == TILE_COLORS[0]


class TestLoading:
    def test_final_stats_entry_is_skipped(self, tmp_path):
        log_file = write_log(tmp_path / 'game_log_a.json', boards(3))
        states = load_game_states(log_file)
        assert len(states) == 3
        assert states[0]['action'] == 'INITIAL'
        assert [s['move_num'] for s in states] == [0, 1, 2]

    def test_load_scores(self, tmp_path):
        log_file = write_log(tmp_path / 'game_log_a.json', boards(3))
        assert load_scores(log_file) == ([0, 1, 2], [0, 4, 8])


class TestRendering:
    def test_create_gif(self, tmp_path):
        log_file = write_log(tmp_path / 'game_log_a.json', boards(4))
        output = create_gif(log_file, str(tmp_path / 'out' / 'game_a.gif'))
        with Image.open(output) as gif:
            assert gif.n_frames == 4

    def test_create_gif_samples_frames(self, tmp_path):
        log_file = write_log(tmp_path / 'game_log_a.json', boards(10))
        output = create_gif(log_file, str(tmp_path / 'game_a.gif'), max_frames=3)
        with Image.open(output) as gif:
            assert gif.n_frames == 3

    def test_empty_log(self, tmp_path):
        log_file = tmp_path / 'game_log_empty.json'
        log_file.write_text(json.dumps([{"final_score": 0}]))
        assert create_gif(log_file, str(tmp_path / 'empty.gif')) is None
        assert not (tmp_path / 'empty.gif').exists()

    def test_plot_scores(self, tmp_path):
        log_files = [
            write_log(tmp_path / 'game_log_a.json', boards(3)),
            write_log(tmp_path / 'game_log_b.json', boards(5)),
        ]
        output = plot_scores(log_files, str(tmp_path / 'scores.png'))
        with Image.open(output) as image:
            assert image.format == 'PNG'

    def test_render_all(self, tmp_path):
        log_dir = tmp_path / 'game_logs'
        log_dir.mkdir()
        write_log(log_dir / 'game_log_a.json', boards(2))
        write_log(log_dir / 'game_log_b.json', boards(2))
        written = render_all(str(log_dir), str(tmp_path / 'gifs'), plot=True)
        assert len(written) == 3
        assert (tmp_path / 'gifs' / 'game_a.gif').exists()
        assert (tmp_path / 'gifs' / 'scores_per_turn.png').exists()

    @pytest.mark.parametrize('content', ['not json', '[1, 2]', '{"game_state": []}'])
    def test_render_all_skips_unreadable_logs(self, tmp_path, capsys, content):
        log_dir = tmp_path / 'game_logs'
        log_dir.mkdir()
        write_log(log_dir / 'game_log_a.json', boards(2))
        (log_dir / 'game_log_broken.json').write_text(content)
        written = render_all(str(log_dir), str(tmp_path / 'gifs'), plot=True)
        assert (tmp_path / 'gifs' / 'game_a.gif').exists()
        assert (tmp_path / 'gifs' / 'scores_per_turn.png').exists()
        assert len(written) == 2
        out = capsys.readouterr().out
        assert 'Error creating GIF for game_log_broken.json' in out
        assert 'Error loading game_log_broken.json' in out

    def test_render_all_without_logs(self, tmp_path):
        assert render_all(str(tmp_path), str(tmp_path / 'gifs')) == []
