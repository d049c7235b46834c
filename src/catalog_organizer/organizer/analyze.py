"""Current folder structure statistics."""

from catalog_organizer.catalog.base import Endpoint, FolderAnalysis


def analyze_folders(endpoints: list[Endpoint]) -> FolderAnalysis:
    """Partition endpoints by their current folder.

    Endpoints without a folder (neither the field nor the extension on the
    raw operation) are collected in `unfoldered`.
    """
    folders: dict[str, list[Endpoint]] = {}
    unfoldered: list[Endpoint] = []

    for ep in endpoints:
        folder = ep.current_folder
        if folder:
            folders.setdefault(folder, []).append(ep)
        else:
            unfoldered.append(ep)

    return FolderAnalysis(
        total_endpoints=len(endpoints),
        total_folders=len(folders),
        unfoldered_count=len(unfoldered),
        folders=folders,
        unfoldered=unfoldered,
    )


def folder_sizes(analysis: FolderAnalysis) -> dict[str, int]:
    """Endpoint count per folder, largest first."""
    sizes = {folder: len(eps) for folder, eps in analysis.folders.items()}
    return dict(sorted(sizes.items(), key=lambda item: item[1], reverse=True))
