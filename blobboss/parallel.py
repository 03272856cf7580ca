from concurrent.futures import ThreadPoolExecutor, as_completed

from .sizes import aggregate_sizes


def parallel_container_sizes(provider, container_names, workers=8):
    """Total the size of several containers in parallel.

    Each container is its own listing, so its pages are still fetched in
    order on a single worker. The first failure is re-raised.

    Returns a dict mapping container name → total bytes.
    """
    results = {}

    if workers <= 1 or len(container_names) <= 1:
        for name in container_names:
            results[name] = aggregate_sizes(provider, name).total
        return results

    with ThreadPoolExecutor(max_workers=workers) as executor:
        future_to_name = {}
        for name in container_names:
            future = executor.submit(aggregate_sizes, provider, name)
            future_to_name[future] = name

        for future in as_completed(future_to_name):
            name = future_to_name[future]
            results[name] = future.result().total

    return results
