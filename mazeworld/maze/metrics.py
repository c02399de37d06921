from typing import Dict


def init_metrics() -> Dict[str, int | float | str | None]:
    return {
        'method': None,
        'seed': None,
        'sites': 0,
        'site_edges': 0,
        'carved_cells': 0,
        'portals_stamped': 0,
        'tasks_stamped': 0,
        'overlays_skipped': 0,
        'runtime_ms': 0.0,
    }
