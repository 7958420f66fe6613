from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib import import_module
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from utils.plotting import HAS_MPL, ensure_out_dir

logger = logging.getLogger(__name__)

_DASHBOARD_SPECS: Sequence[Tuple[str, str, str]] = (
    ("reports.prime_search_dashboard", "make_prime_search_dashboard", "prime_search.png"),
    ("reports.key_split_dashboard", "make_key_split_dashboard", "key_split.png"),
)


@dataclass
class DashboardResult:
    """Outcome of a single dashboard export attempt."""

    module: str
    attr: str
    target: Path
    status: str
    reason: str = ""
    output: Optional[Path] = None


def _load_callable(module_name: str, attr: str) -> Tuple[Optional[Callable[[Path], Path]], str]:
    try:
        module = import_module(module_name)
    except ImportError as exc:
        return None, f"import failed: {exc}"

    func = getattr(module, attr, None)
    if func is None:
        return None, f"callable '{attr}' not found in {module_name}"
    return func, ""


def make_all_dashboards(out_dir: str | Path = "Visualizations") -> List[DashboardResult]:
    """Generate all dashboards under *out_dir* and describe the outcome of each attempt."""

    directory = ensure_out_dir(out_dir)
    results: List[DashboardResult] = []

    for module_name, attr, filename in _DASHBOARD_SPECS:
        target = directory / filename
        if not HAS_MPL:
            reason = "matplotlib not installed"
        else:
            func, reason = _load_callable(module_name, attr)
            if func is not None:
                output = Path(func(target))
                results.append(
                    DashboardResult(module=module_name, attr=attr, target=target, status="saved", output=output)
                )
                continue
        logger.warning("Skipped %s.%s (%s)", module_name, attr, reason)
        results.append(
            DashboardResult(module=module_name, attr=attr, target=target, status="skipped", reason=reason)
        )
    return results


def main() -> None:
    for result in make_all_dashboards():
        if result.status == "saved" and result.output is not None:
            print(result.output.resolve())
        else:
            print(f"skipped {result.module}.{result.attr} ({result.reason})")


if __name__ == "__main__":
    main()
