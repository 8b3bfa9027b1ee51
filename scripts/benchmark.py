"""Benchmark /data latency of a running dashboard at several resolutions."""

import asyncio
import time
from typing import Dict, List

import httpx


async def benchmark_resolutions(
    base_url: str = "http://localhost:3456",
    resolutions: List[int] = (50, 100, 250, 500, 1000),
    requests_per_resolution: int = 50,
    concurrent: int = 10,
) -> Dict:
    """
    Benchmark payload building at each resolution.

    Args:
        base_url: Base URL of the web dashboard.
        resolutions: Resolutions to set before each round.
        requests_per_resolution: Number of /data requests per round.
        concurrent: Number of concurrent requests.

    Returns:
        Benchmark results keyed by resolution.
    """
    results = {}

    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        original = (await client.get("/config")).json()["resolution"]

        for resolution in resolutions:
            response = await client.post("/resolution", json={"resolution": resolution})
            if response.status_code != 200:
                results[resolution] = {"error": response.json()}
                continue

            latencies = []
            points = 0
            errors = 0

            async def fetch() -> None:
                nonlocal points, errors
                start = time.time()
                response = await client.get("/data")
                if response.status_code == 200:
                    latencies.append(time.time() - start)
                    points = len(response.json()["dataPoints"])
                else:
                    errors += 1

            start_time = time.time()
            for i in range(0, requests_per_resolution, concurrent):
                batch = min(concurrent, requests_per_resolution - i)
                await asyncio.gather(*[fetch() for _ in range(batch)])
            total_time = time.time() - start_time

            latencies.sort()
            results[resolution] = {
                "successful": len(latencies),
                "errors": errors,
                "points": points,
                "requests_per_second": len(latencies) / total_time if total_time > 0 else 0,
                "avg_latency_seconds": sum(latencies) / len(latencies) if latencies else 0,
                "p95_latency_seconds": latencies[int(len(latencies) * 0.95)] if latencies else 0,
            }

        await client.post("/resolution", json={"resolution": original})

    return results


if __name__ == "__main__":
    import json

    print("Running dashboard benchmarks...")

    resolution_results = asyncio.run(benchmark_resolutions())
    print("\nResolution Results:")
    print(json.dumps(resolution_results, indent=2))
