from datetime import date, datetime, timedelta
from itertools import combinations

from timeline.bucketing import BucketEntry, WeekStart, bucketize, week_window
from timeline.columns import assign_columns
from timeline.interval import Interval, max_overlap_depth, overlaps
from timeline.layout import LayoutSettings, layout_week, project
from timeline.task import Task
from timeline.timezone_utils import localize, set_timezone

TUESDAY = date(2024, 3, 5)


def _task(task_id: int, start, end, **kwargs) -> Task:
    return Task(id=task_id, title=f"Task {task_id}", start=start, end=end, **kwargs)


def _entry(task_id: int, start: tuple[int, int], end: tuple[int, int]) -> BucketEntry:
    interval = Interval(
        localize(datetime(2024, 3, 5, *start)),
        localize(datetime(2024, 3, 5, *end)),
    )
    return BucketEntry(Task(id=task_id), interval)


def _columns(placed) -> dict[int, int]:
    return {entry.task.id: entry.column for entry in placed}


def test_week_window_sunday_start() -> None:
    start, end = week_window(TUESDAY)

    assert start == localize(datetime(2024, 3, 3))
    assert end == localize(datetime(2024, 3, 9, 23, 59, 59, 999999))


def test_week_window_monday_start_and_naive_bounds() -> None:
    start, end = week_window(TUESDAY, WeekStart.MONDAY, aware=False)

    assert start == datetime(2024, 3, 4)
    assert end.date() == date(2024, 3, 10)
    assert start.tzinfo is None


def test_bucketize_creates_a_bucket_for_every_day() -> None:
    start, end = week_window(TUESDAY)
    buckets = bucketize([], start, end)

    assert sorted(buckets) == [date(2024, 3, 3) + timedelta(days=i) for i in range(7)]
    assert all(entries == [] for entries in buckets.values())


def test_bucketize_uses_the_end_day_and_inclusive_bounds() -> None:
    tasks = [
        _task(1, "2024-03-04T22:00", "2024-03-05T02:00"),
        _task(2, None, "2024-03-03T00:00"),
        _task(3, None, "2024-03-09T23:59"),
        _task(4, None, "2024-03-10T00:00"),
        _task(5, None, "2024-03-02T12:00"),
    ]
    start, end = week_window(TUESDAY)
    buckets = bucketize(tasks, start, end)

    assert [e.task.id for e in buckets[date(2024, 3, 5)]] == [1]
    assert [e.task.id for e in buckets[date(2024, 3, 3)]] == [2]
    assert [e.task.id for e in buckets[date(2024, 3, 9)]] == [3]
    placed = {e.task.id for entries in buckets.values() for e in entries}
    assert placed == {1, 2, 3}


def test_bucketize_accepts_naive_week_bounds() -> None:
    set_timezone("Europe/Berlin")
    tasks = [
        _task(1, "2024-03-05T09:00", "2024-03-05T10:00"),
        _task(2, None, "2024-03-09T23:30"),
        _task(3, None, "2024-03-10T00:30"),
    ]
    start, end = week_window(TUESDAY, aware=False)
    buckets = bucketize(tasks, start, end)

    assert [e.task.id for e in buckets[date(2024, 3, 5)]] == [1]
    assert [e.task.id for e in buckets[date(2024, 3, 9)]] == [2]
    assert sorted(buckets) == [date(2024, 3, 3) + timedelta(days=i) for i in range(7)]


def test_bucketize_flattens_children() -> None:
    child = _task(2, "2024-03-06T10:00", "2024-03-06T11:00")
    parent = _task(1, "2024-03-05T09:00", "2024-03-05T10:00", children=[child])
    start, end = week_window(TUESDAY)
    buckets = bucketize([parent], start, end)

    assert [e.task.id for e in buckets[date(2024, 3, 5)]] == [1]
    assert [e.task.id for e in buckets[date(2024, 3, 6)]] == [2]


def test_overlapping_tasks_get_separate_columns() -> None:
    placed = assign_columns([_entry(1, (9, 0), (10, 0)), _entry(2, (9, 30), (10, 30))])

    assert _columns(placed) == {1: 0, 2: 1}


def test_adjacent_tasks_share_a_column() -> None:
    placed = assign_columns([_entry(1, (9, 0), (10, 0)), _entry(3, (10, 0), (11, 0))])

    assert _columns(placed) == {1: 0, 3: 0}


def test_equal_starts_keep_input_order() -> None:
    placed = assign_columns([_entry(7, (9, 0), (9, 30)), _entry(3, (9, 0), (11, 0))])

    assert _columns(placed) == {7: 0, 3: 1}


def test_columns_never_double_book_and_stay_minimal() -> None:
    entries = [
        _entry(1, (8, 0), (9, 30)),
        _entry(2, (8, 30), (9, 0)),
        _entry(3, (9, 0), (10, 0)),
        _entry(4, (9, 15), (9, 45)),
        _entry(5, (9, 45), (11, 0)),
        _entry(6, (12, 0), (13, 0)),
    ]
    placed = assign_columns(list(reversed(entries)))

    for a, b in combinations(placed, 2):
        if overlaps(a.interval, b.interval):
            assert a.column != b.column
    used = max(entry.column for entry in placed) + 1
    assert used == max_overlap_depth(entry.interval for entry in entries)


def test_project_positions_blocks_on_the_grid() -> None:
    positioned = project([_entry(1, (9, 0), (10, 0)), _entry(2, (9, 30), (10, 30))], 40, 10)

    first, second = positioned
    assert (first.top, first.height, first.column, first.column_count) == (360, 40, 0, 2)
    assert (second.top, second.height, second.column, second.column_count) == (380, 40, 1, 2)
    assert first.day == TUESDAY


def test_project_enforces_minimum_block_height() -> None:
    (block,) = project([_entry(1, (9, 0), (9, 5))], 40, 10)

    assert block.top == 360
    assert block.height == 10


def test_layout_week_clips_tasks_that_start_on_an_earlier_day() -> None:
    tasks = [_task(1, "2024-03-04T22:00", "2024-03-05T02:00")]
    week = layout_week(tasks, TUESDAY)

    (block,) = week[TUESDAY]
    assert block.top == 0
    assert block.height == 80


def test_layout_week_separate_clusters_have_own_widths() -> None:
    tasks = [
        _task(1, "2024-03-05T09:00", "2024-03-05T10:00"),
        _task(2, "2024-03-05T09:30", "2024-03-05T10:30"),
        _task(3, "2024-03-05T14:00", "2024-03-05T15:00"),
    ]
    week = layout_week(tasks, TUESDAY)

    widths = {block.task.id: block.column_count for block in week[TUESDAY]}
    assert widths == {1: 2, 2: 2, 3: 1}


def test_layout_week_fills_missing_start_with_default_duration() -> None:
    tasks = [_task(1, None, "2024-03-05T12:00")]
    week = layout_week(tasks, TUESDAY, LayoutSettings(default_duration=timedelta(hours=1)))

    (block,) = week[TUESDAY]
    assert block.interval.start == localize(datetime(2024, 3, 5, 11, 0))
    assert block.top == 440


def test_unparsable_end_is_left_out_without_raising() -> None:
    tasks = [
        _task(1, "2024-03-05T09:00", "not-a-date"),
        _task(2, "2024-03-05T09:00", "2024-03-05T10:00"),
    ]
    week = layout_week(tasks, TUESDAY)

    ids = [block.task.id for blocks in week.values() for block in blocks]
    assert ids == [2]


def test_layout_week_monday_start() -> None:
    tasks = [_task(1, "2024-03-10T09:00", "2024-03-10T10:00")]
    week = layout_week(tasks, TUESDAY, LayoutSettings(week_start=WeekStart.MONDAY))

    assert min(week) == date(2024, 3, 4)
    assert [block.task.id for block in week[date(2024, 3, 10)]] == [1]
