"""Time-indexed data: single columns, time series and multi-column time tables."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import Generic, TypeVar

T = TypeVar("T")

Time = float

# Maximum number of rows a TimeTable keeps; older rows are dropped first.
LIMIT = 5000


class ColumnData(Generic[T]):
    """A single named or unnamed column of data."""

    def __init__(self, data: Iterable[T] = (), name: str | None = None) -> None:
        self.data: list[T] = list(data)
        self.name = name

    @classmethod
    def with_name(cls, name: str) -> ColumnData[T]:
        """An empty column carrying ``name``."""
        return cls(name=name)

    def __len__(self) -> int:
        return len(self.data)

    def __iter__(self) -> Iterator[T]:
        return iter(self.data)

    def __repr__(self) -> str:
        return f"ColumnData(data={self.data!r}, name={self.name!r})"

    def add(self, element: T) -> None:
        self.data.append(element)

    def pop_first(self) -> None:
        """Remove the first element; raises IndexError when empty."""
        if not self.data:
            raise IndexError("pop_first on an empty column")
        del self.data[0]

    def get(self, index: int) -> T | None:
        """Element at ``index``, or None if there is none."""
        if 0 <= index < len(self.data):
            return self.data[index]
        return None

    def get_between(self, start: int, end: int) -> list[T]:
        """Elements from ``start`` to ``end``, both inclusive."""
        if start < 0 or end >= len(self.data) or start > end + 1:
            raise IndexError(f"range {start}..={end} out of bounds for length {len(self.data)}")
        return self.data[start:end + 1]

    def reset(self) -> None:
        self.data = []


class Timeline:
    """A sequence of time stamps used to look up indices in series and tables."""

    def __init__(self, times: Iterable[Time] = ()) -> None:
        self._times: list[Time] = [float(t) for t in times]

    def __len__(self) -> int:
        return len(self._times)

    def __iter__(self) -> Iterator[Time]:
        return iter(self._times)

    def __repr__(self) -> str:
        return f"Timeline({self._times!r})"

    def add(self, time: Time) -> None:
        self._times.append(float(time))

    def last(self) -> Time:
        """The latest time stamp, or 0.0 when empty."""
        return self._times[-1] if self._times else 0.0

    def pop_first(self) -> None:
        """Remove the first time stamp; raises IndexError when empty."""
        if not self._times:
            raise IndexError("pop_first on an empty timeline")
        del self._times[0]

    def get_index(self, time: Time) -> int | None:
        """Index of the first time stamp at or after ``time``."""
        return next((i for i, t in enumerate(self._times) if t >= time), None)

    def get_index_under(self, time: Time) -> int | None:
        """Index just before the first time stamp later than ``time``.

        Returns None when no time stamp is later than ``time`` or when the
        very first one already is.
        """
        idx = next((i for i, t in enumerate(self._times) if t > time), None)
        if idx is None or idx == 0:
            return None
        return idx - 1

    def get_range(self, start: Time, end: Time) -> range | None:
        """Indices whose time stamps lie within ``[start, end]``."""
        if start >= end:
            return None
        first = self.get_index(start)
        if first is None:
            return None
        last = self.get_index_under(end)
        if last is None:
            return None
        return range(first, last + 1)

    def get_range_raw(self, start: Time, end: Time) -> list[Time] | None:
        """Time stamps within ``[start, end]``."""
        indices = self.get_range(start, end)
        if indices is None:
            return None
        return self._times[indices.start:indices.stop]


class TimeSeries(Generic[T]):
    """One column of data paired with a timeline of the same length."""

    def __init__(self, time: Iterable[Time] = (), data: Iterable[T] = ()) -> None:
        self.time = Timeline(time)
        self.data: ColumnData[T] = ColumnData(data)
        if len(self.time) != len(self.data):
            raise ValueError("Size of time and data are different!")

    def __iter__(self) -> Iterator[tuple[Time, T]]:
        return zip(self.time, self.data)

    def __len__(self) -> int:
        return len(self.time)

    def with_name(self, name: str) -> TimeSeries[T]:
        """A copy of this series whose column is named ``name``."""
        named: TimeSeries[T] = TimeSeries(self.time, self.data)
        named.data.name = name
        return named

    @classmethod
    def empty(cls) -> TimeSeries[T]:
        return cls()

    def add(self, time: Time, element: T) -> None:
        self.time.add(time)
        self.data.add(element)

    def time_last(self) -> Time:
        return self.time.last()

    def get_at_time(self, time: Time) -> T | None:
        """Element at the first time stamp at or after ``time``."""
        idx = self.time.get_index(time)
        return None if idx is None else self.data.get(idx)

    def get_range(self, start: Time, end: Time) -> list[T] | None:
        """Elements whose time stamps lie within ``[start, end]``."""
        indices = self.time.get_range(start, end)
        if indices is None:
            return None
        return self.data.get_between(indices.start, indices.stop - 1)


class TimeTable(Generic[T]):
    """Several columns of data sharing one timeline, capped at ``LIMIT`` rows."""

    def __init__(
        self,
        time: Timeline | None = None,
        columns: Iterable[ColumnData[T]] | None = None,
    ) -> None:
        self.time = time if time is not None else Timeline()
        self.columns: list[ColumnData[T]] = list(columns) if columns is not None else []

    @classmethod
    def from_timeseries(cls, timeseries: TimeSeries[T]) -> TimeTable[T]:
        """A single-column table holding a copy of ``timeseries``."""
        column = ColumnData(timeseries.data, timeseries.data.name)
        return cls(Timeline(timeseries.time), [column])

    @classmethod
    def with_names(cls, names: Iterable[str]) -> TimeTable[T]:
        """An empty table with one named column per name."""
        return cls(Timeline(), [ColumnData.with_name(n) for n in names])

    def names(self) -> list[str]:
        return [col.name or "" for col in self.columns]

    def ncols(self) -> int:
        return len(self.columns)

    def nrow(self) -> int:
        return len(self.time)

    def pop_first(self) -> None:
        self.time.pop_first()
        for col in self.columns:
            col.pop_first()

    def clear(self) -> None:
        self.time = Timeline()
        for col in self.columns:
            col.reset()

    def get_column(self, column: int) -> ColumnData[T] | None:
        if 0 <= column < len(self.columns):
            return self.columns[column]
        return None

    def zipped(self, column: int) -> list[tuple[Time, T]] | None:
        """Pairs of (time, value) for ``column``."""
        col = self.get_column(column)
        if col is None:
            return None
        return list(zip(self.time, col))

    def get_at_time(self, column: int, time: Time) -> T | None:
        idx = self.time.get_index(time)
        col = self.get_column(column)
        if idx is None or col is None:
            return None
        return col.get(idx)

    def get_time_range(self, start: Time, end: Time) -> list[Time] | None:
        return self.time.get_range_raw(start, end)

    def time_last(self) -> Time:
        return self.time.last()

    def get_range(self, column: int, start: Time, end: Time) -> list[T] | None:
        """Values of ``column`` whose time stamps lie within ``[start, end]``."""
        indices = self.time.get_range(start, end)
        col = self.get_column(column)
        if indices is None or col is None:
            return None
        return col.get_between(indices.start, indices.stop - 1)

    def add(self, time: Time, sample: Sequence[T]) -> None:
        """Append a row; the oldest row is dropped once ``LIMIT`` is exceeded."""
        self.time.add(time)
        for col, element in zip(self.columns, sample):
            col.add(element)
        if self.nrow() > LIMIT:
            self.pop_first()

    def values(self, column: int) -> list[tuple[float, float]] | None:
        """Plot points (time, value) for ``column``."""
        return self.values_shifted(column, 0.0, 0.0)

    def values_shifted(self, column: int, x: float, y: float) -> list[tuple[float, float]] | None:
        """Plot points for ``column`` with time shifted by ``x`` and value by ``y``."""
        pairs = self.zipped(column)
        if pairs is None:
            return None
        return [(float(t + x), float(v + y)) for t, v in pairs]


def vehicle_positions(states: Iterable[Sequence[float]]) -> list[tuple[float, float]]:
    """Plot points (x, y) taken from the first two entries of each state."""
    return [(float(s[0]), float(s[1])) for s in states]