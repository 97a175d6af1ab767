from __future__ import annotations


def traffic_intensity(volume: float, aht_seconds: float, interval_seconds: float) -> float:
    """
    Offered load a (Erlangs) = arrival_rate * AHT.
    With arrivals measured as count per interval:
      arrival_rate = volume / interval_seconds
      => a = volume * aht_seconds / interval_seconds

    Non-positive inputs mean "no load" and return 0.0.
    """
    if volume <= 0 or aht_seconds <= 0 or interval_seconds <= 0:
        return 0.0
    return float(volume) * float(aht_seconds) / float(interval_seconds)


__all__ = ["traffic_intensity"]
