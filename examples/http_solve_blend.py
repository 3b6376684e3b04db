from __future__ import annotations

import json
import os

import httpx
import numpy as np

try:
    import matplotlib
    matplotlib.use("TkAgg")
except Exception:
    pass
import matplotlib.pyplot as plt


def main() -> None:
    api_key = os.environ.get("FERTIBLEND_API_KEY", "dev-key")
    base = os.environ.get("FERTIBLEND_BASE_URL", "http://localhost:8080")

    with httpx.Client(timeout=30.0) as client:
        payload = client.get(f"{base}/v1/blend/example").json()
        print("--- Example request ---")
        print(json.dumps(payload, indent=2))

        r = client.post(f"{base}/v1/blend/solve", json=payload, headers={"x-api-key": api_key})
        if r.status_code != 200:
            print("/v1/blend/solve error:")
            print(r.text)
        r.raise_for_status()
        result = r.json()

    diag = result["diagnostics"]
    print("\n--- Blend ---")
    for a in result["nonzero"]:
        print(f"{a['name']}: {a['grams']:.3f} g")
    print(f"\n{diag['label']}: average miss {diag['mae']:.2f} points, "
          f"mass {diag['mass_achieved']:.1f} g ({diag['mass_error']:+.1f} g), {diag['iterations']} iterations")
    for line in result["suggestions"]:
        print(f"- {line}")

    names = list(result["targets"])
    targets = np.array([result["targets"][n] for n in names], dtype=float)
    achieved = np.array([result["achieved_pct"][n] for n in names], dtype=float)
    idx = np.arange(len(names))

    fig, ax = plt.subplots(figsize=(7, 4), dpi=120)
    ax.bar(idx - 0.2, targets, width=0.4, label="target")
    ax.bar(idx + 0.2, achieved, width=0.4, label="achieved")
    ax.set_xticks(idx)
    ax.set_xticklabels(names)
    ax.set_ylabel("% by mass")
    ax.set_title(f"HTTP blend solve: {diag['label']}")
    ax.legend(loc="upper right")
    plt.tight_layout()
    plt.show()


if __name__ == "__main__":
    main()
