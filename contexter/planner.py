from typing import Collection, List


def plan_request(selected_files: Collection[str], all_files: Collection[str]) -> List[str]:
    """
    Decide which paths to send to the content endpoint.

    An empty list asks the server for the whole project. It is returned when
    the selection has as many entries as the file list; this compares sizes,
    not contents, so the selection must be cleared whenever the file list
    changes. Otherwise the selected paths are returned sorted.
    """
    if len(selected_files) == len(all_files):
        return []
    return sorted(selected_files)
