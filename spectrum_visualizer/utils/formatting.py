"""
Formatierungsfunktionen für Anzeige.

Konvertiert numerische Werte in lesbare Strings (Statuszeile, Bandachsen).
"""


def format_time(seconds: float, show_ms: bool = False) -> str:
    """
    Formatiere Wiedergabeposition.

    Args:
        seconds: Zeit in Sekunden
        show_ms: Zeige Millisekunden

    Returns:
        Formatierter String (z.B. "1:23" oder "1:23.456")
    """
    sign = "-" if seconds < 0 else ""
    minutes, secs = divmod(abs(seconds), 60)

    if show_ms:
        return f"{sign}{int(minutes)}:{secs:06.3f}"
    return f"{sign}{int(minutes)}:{int(secs):02d}"


def format_frequency(hz: float) -> str:
    """
    Kompakte Frequenzangabe für Bandbeschriftungen.

    Returns:
        z.B. "60 Hz", "1.5 kHz", "12 kHz"
    """
    if hz >= 10000:
        return f"{hz/1000:.0f} kHz"
    if hz >= 1000:
        return f"{hz/1000:.1f} kHz"
    return f"{hz:.0f} Hz"


def format_sample_rate(sr: int) -> str:
    """z.B. "44.1 kHz" oder "48 kHz"."""
    if sr % 1000 == 0:
        return f"{sr // 1000} kHz"
    return f"{sr / 1000:.1f} kHz"


def format_channels(num_channels: int) -> str:
    """Mono, Stereo oder "X Kanäle"."""
    if num_channels == 1:
        return "Mono"
    if num_channels == 2:
        return "Stereo"
    return f"{num_channels} Kanäle"


def format_block_info(block_size: int, sample_rate: int) -> str:
    """
    Blockgröße mit Frequenz- und Zeitauflösung.

    Returns:
        z.B. "1024 Samples | 43.1 Hz/Bin | 23.2 ms"
    """
    resolution = sample_rate / block_size
    duration_ms = block_size / sample_rate * 1000
    return f"{block_size} Samples | {resolution:.1f} Hz/Bin | {duration_ms:.1f} ms"
