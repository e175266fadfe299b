import datetime

Epoch = datetime.datetime(1970, 1, 1, tzinfo=datetime.UTC)


def to_epoch_ns(dt: datetime.datetime) -> int:
    """Integer nanoseconds since the Unix epoch. Naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.UTC)
    return (dt - Epoch) // datetime.timedelta(microseconds=1) * 1000


def from_epoch_ns(ns: int) -> datetime.datetime:
    return Epoch + datetime.timedelta(microseconds=ns // 1000)
