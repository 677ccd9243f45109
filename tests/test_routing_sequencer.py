from src.route_engine.services.routing.models import MatrixCell, TravelCostMatrix, origin_row
from src.route_engine.services.routing.sequencer import nearest_neighbor_order


def _matrix(distance_rows: list[list[float | None]]) -> TravelCostMatrix:
    """Origin rows are [start, stop 0, stop 1, ...]; None marks an unreachable cell."""
    rows = [
        [
            MatrixCell(distance_meters=None, duration_seconds=None, status="ZERO_RESULTS")
            if value is None
            else MatrixCell(distance_meters=value, duration_seconds=value / 10, status="OK")
            for value in row
        ]
        for row in distance_rows
    ]
    return TravelCostMatrix.from_rows(rows, stop_count=len(distance_rows) - 1)


def test_origin_row_maps_start_and_stops():
    assert origin_row(None) == 0
    assert origin_row(0) == 1
    assert origin_row(4) == 5


def test_nearest_neighbor_uses_chosen_stop_row():
    matrix = _matrix(
        [
            [100, 200, 300],
            [0, 900, 50],
            [900, 0, 900],
            [300, 40, 0],
        ]
    )

    assert nearest_neighbor_order(matrix) == [0, 2, 1]


def test_ties_go_to_lowest_index():
    matrix = _matrix(
        [
            [1000, 1000, 2000],
            [0, 500, 500],
            [500, 0, 500],
            [500, 500, 0],
        ]
    )

    assert nearest_neighbor_order(matrix) == [0, 1, 2]


def test_unreachable_cells_are_never_selected():
    matrix = _matrix(
        [
            [None, 5000],
            [0, 100],
            [10, 0],
        ]
    )

    assert nearest_neighbor_order(matrix) == [1, 0]


def test_terminates_early_when_nothing_reachable():
    matrix = _matrix(
        [
            [1000, None, 3000],
            [0, None, None],
            [None, 0, None],
            [None, None, 0],
        ]
    )

    order = nearest_neighbor_order(matrix)

    assert order == [0]


def test_missing_rows_read_as_unreachable():
    rows = [[MatrixCell(1000, 60), MatrixCell(2000, 120)]]
    matrix = TravelCostMatrix.from_rows(rows, stop_count=2)

    assert nearest_neighbor_order(matrix) == [0]
    assert not matrix.leg(0, 1).reachable


def test_order_is_deterministic_and_a_valid_permutation():
    distance_rows = [[float((7 * i + 3 * j) % 11 + 1) * 100 for j in range(6)] for i in range(7)]
    matrix = _matrix(distance_rows)

    first = nearest_neighbor_order(matrix)

    for _ in range(5):
        assert nearest_neighbor_order(matrix) == first
    assert len(first) == len(set(first)) <= 6
    assert all(0 <= index < 6 for index in first)
