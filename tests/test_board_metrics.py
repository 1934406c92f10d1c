from wumpus.board_metrics import exploration_percent, remaining_counts, status_code, summarize_results


def test_status_code():
    assert status_code(treasures_found=0, total_treasures=2, hazard_hit=False) == "PLAYING"
    assert status_code(treasures_found=2, total_treasures=2, hazard_hit=False) == "WON"
    assert status_code(treasures_found=2, total_treasures=2, hazard_hit=True) == "LOST"


def test_remaining_counts():
    counts = remaining_counts(treasures=2, wumpuses=1, pits=3, treasures_found=1, wumpuses_killed=1)
    assert counts == {"treasure": 1, "wumpus": 0, "pit": 3}


def test_exploration_percent():
    assert exploration_percent(discovered=4, size=4) == 25
    assert exploration_percent(discovered=99, size=4) == 100


def test_summarize_results():
    summary = summarize_results([
        {"status": "WON", "score": 396, "steps": 10},
        {"status": "LOST", "score": -201, "steps": 3},
        {"status": "PLAYING", "score": -40, "steps": 40},
    ])
    assert summary["games"] == 3
    assert (summary["wins"], summary["losses"], summary["stuck"]) == (1, 1, 1)
    assert summary["best_score"] == 396
    assert summary["avg_steps"] == 53 / 3


def test_summarize_empty():
    assert summarize_results([])["win_rate"] == 0.0
