"""Detection of well-known background services in the process table."""

from collections.abc import Iterable, Sequence

from matricx.formatting import safe_num
from matricx.models import ProcessSnapshot, ServiceCatalogEntry, ServiceStatus

SERVICE_CATALOG: tuple[ServiceCatalogEntry, ...] = (
    ServiceCatalogEntry("Docker", ("dockerd", "docker", "containerd")),
    ServiceCatalogEntry("MongoDB", ("mongod", "mongo")),
    ServiceCatalogEntry("Postgres", ("postgres", "postgresql")),
    ServiceCatalogEntry("MySQL", ("mysqld", "mysql")),
    ServiceCatalogEntry("Redis", ("redis-server", "redis")),
    ServiceCatalogEntry("Nginx", ("nginx",)),
    ServiceCatalogEntry("Apache", ("httpd", "apache2")),
)


def match_services(
    processes: Iterable[ProcessSnapshot],
    catalog: Sequence[ServiceCatalogEntry] = SERVICE_CATALOG,
) -> list[ServiceStatus]:
    """
    Report each catalogued service as running or stopped.

    A service runs when any process name contains one of its substrings,
    compared case-insensitively. The first such process in list order wins.
    """
    lowered = [(proc.name.lower(), proc) for proc in processes]
    statuses: list[ServiceStatus] = []
    for entry in catalog:
        found = next(
            (proc for name, proc in lowered if any(m in name for m in entry.matches)),
            None,
        )
        if found is None:
            statuses.append(ServiceStatus(entry=entry, running=False))
        else:
            statuses.append(
                ServiceStatus(
                    entry=entry,
                    running=True,
                    pid=found.pid,
                    cpu_percent=safe_num(found.cpu_percent),
                )
            )
    return statuses


def format_service_status(status: ServiceStatus) -> str:
    """Markup for one service, e.g. ``Redis: running (pid 42 0.3% CPU)``."""
    if status.running:
        return (
            f"{status.entry.name}: [green]running[/green] "
            f"(pid {status.pid} {safe_num(status.cpu_percent):.1f}% CPU)"
        )
    return f"{status.entry.name}: [red]stopped[/red]"
