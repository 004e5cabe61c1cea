import re


def _ini_value_to_str(v):
    """Strip whitespace and surrounding quotes; "nil"/"none"/"" -> None."""
    if v is None:
        return None
    s = str(v).strip()
    if (s.startswith('"') and s.endswith('"')) or (s.startswith("'") and s.endswith("'")):
        s = s[1:-1].strip()
    if not s or s.lower() in ("nil", "none"):
        return None
    return s


def _ini_value_to_float(v):
    """Best-effort parse of numeric-ish values from config.ini.

    Handles:
      - plain floats/ints ("64", "0.999")
      - percentages ("99.9%" -> 0.999)
      - nil/none ("nil", "none" -> None)
      - quoted strings

    Returns float or None.
    """
    s = _ini_value_to_str(v)
    if s is None:
        return None
    if s.endswith('%'):
        try:
            return float(s[:-1].strip()) / 100.0
        except ValueError:
            return None
    try:
        return float(s)
    except ValueError:
        return None


def parse_config_ini(path: str) -> dict:
    """Parse a `key = value` config.ini into a dict (raw strings).

    Lines starting with `#` or `;` are comments; `[section]` headers are ignored.
    """
    out: dict[str, str] = {}
    with open(path, 'r', encoding='utf-8', errors='replace') as f:
        for line in f:
            line = line.rstrip("\n")
            stripped = line.lstrip()
            if not stripped or stripped.startswith(('#', ';', '[')):
                continue
            m = re.match(r'^([^=]+?)\s*=\s*(.*)$', line)
            if not m:
                continue
            k = m.group(1).strip()
            v = m.group(2).strip()
            out[k] = v
    return out


def config_get_float(cfg: dict, key: str):
    return _ini_value_to_float(cfg.get(key))


def config_get_int(cfg: dict, key: str):
    f = config_get_float(cfg, key)
    if f is None or not f.is_integer():
        return None
    return int(f)


def config_get_str(cfg: dict, key: str):
    return _ini_value_to_str(cfg.get(key))


def load_histogram_config(path: str) -> dict:
    """Read histogram settings from a config.ini; missing keys map to None."""
    cfg = parse_config_ini(path)
    return {
        "max_bins": config_get_int(cfg, "max_bins"),
        "alpha": config_get_float(cfg, "alpha"),
        "window": config_get_float(cfg, "window"),
        "quantiles": config_get_str(cfg, "quantiles"),
        "snapshot_every": config_get_int(cfg, "snapshot_every"),
    }
