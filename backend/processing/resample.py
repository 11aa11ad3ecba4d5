import numpy as np


def path_length(points: np.ndarray) -> float:
    seg = np.diff(np.asarray(points, dtype=np.float64), axis=0)
    return float(np.hypot(seg[:, 0], seg[:, 1]).sum())


def resample(
    points: np.ndarray,
    n: int,
    times: np.ndarray | None = None,
) -> tuple[np.ndarray, np.ndarray | None]:
    """Resample a stroke to n points spaced uniformly by arc length.

    x, y and (when given) timestamps are linearly interpolated inside the
    enclosing segment, so the output always has exactly n rows no matter
    how densely the input was sampled.

    Args:
        points: shape (M, 2)
        n: number of output points
        times: shape (M,) or None
    Returns:
        resampled: shape (n, 2)
        resampled_times: shape (n,) or None
    """
    pts = np.asarray(points, dtype=np.float64)
    ts = None if times is None else np.asarray(times, dtype=np.float64)

    seg = np.hypot(*np.diff(pts, axis=0).T)
    total = float(seg.sum())

    # Degenerate stroke: nothing to walk along
    if total <= 0:
        resampled = np.repeat(pts[:1], n, axis=0)
        resampled_times = None if ts is None else np.full(n, ts[0])
        return resampled, resampled_times

    # Drop zero-length segments so the cumulative length is strictly increasing
    keep = np.concatenate([[True], seg > 0])
    pts = pts[keep]
    cum = np.concatenate([[0.0], np.cumsum(seg[seg > 0])])
    targets = np.linspace(0.0, cum[-1], n)

    resampled = np.column_stack([
        np.interp(targets, cum, pts[:, 0]),
        np.interp(targets, cum, pts[:, 1]),
    ])
    resampled_times = None if ts is None else np.interp(targets, cum, ts[keep])
    return resampled, resampled_times
