"""
Automated demo interview for a fitness app idea.

Drives a running web app through its JSON API: submits the idea, picks
answers for every question, then prints the app concepts.

Usage:
    python3 web_app.py                      # in another terminal
    python3 scripts/run_demo_interview.py [--base http://localhost:5001]
"""

import argparse
import json
import sys
import time
from pathlib import Path

import requests

IDEA = "A fitness app that helps small groups of friends train together"

# Preferred answers, matched case-insensitively against the offered options.
# When nothing matches the first option is picked.
PREFERRED = [
    "friends", "beginner", "mobile", "social", "free", "weekly",
    "challenge", "progress", "reminder", "group",
]


def pick_labels(choices: list) -> list:
    labels = [c["label"] for c in choices]
    picked = [l for l in labels if any(word in l.lower() for word in PREFERRED)]
    return picked[:2] or labels[:1]


def post(base: str, path: str, payload: dict) -> dict:
    r = requests.post(f"{base}{path}", json=payload, timeout=120)
    if r.status_code >= 400:
        print(f"  {path} failed ({r.status_code}): {r.json().get('error')}")
        sys.exit(1)
    return r.json()


def main():
    parser = argparse.ArgumentParser(description="Run a scripted interview against the web app")
    parser.add_argument("--base", default="http://localhost:5001", help="Web app URL")
    parser.add_argument("--idea", default=IDEA, help="App idea to submit")
    args = parser.parse_args()
    base = args.base.rstrip("/")

    print("\n  Starting automated demo interview...")
    print(f"  Server: {base}\n")

    # 1. Start session
    try:
        session = post(base, "/api/start", {})
    except requests.ConnectionError:
        print("  Could not connect to server. Start it first:")
        print("    python3 web_app.py\n")
        sys.exit(1)

    session_id = session["session_id"]
    print(f"  Session: {session_id}")
    print(f"  Idea: {args.idea}\n")

    # 2. Submit the idea
    data = post(base, "/api/prompt", {"session_id": session_id, "prompt": args.idea})
    if not data["ok"]:
        print(f"  Idea rejected: {data['state']['notice']['message']}")
        sys.exit(1)

    # 3. Answer every question
    state = data["state"]
    while state["stage"] == "in_progress":
        labels = pick_labels(state["choices"])
        pct = state["progress"]
        bar = "=" * (pct // 5) + "-" * (20 - pct // 5)
        print(f"  [{bar}] {pct:3d}%")
        print(f"    Q: {state['current_question']}")
        print(f"    A: {', '.join(labels)}\n")

        for label in labels:
            post(base, "/api/toggle", {"session_id": session_id, "label": label})
        data = post(base, "/api/next", {"session_id": session_id})
        state = data["state"]
        if not data["ok"]:
            # Errors leave the question on screen; try once more after a pause
            print(f"    Retrying: {state['notice']['message']}")
            time.sleep(1)
            data = post(base, "/api/next", {"session_id": session_id})
            state = data["state"]
            if not data["ok"]:
                print("  Giving up.")
                sys.exit(1)

    # 4. Show and save the concepts
    print(f"  Interview complete! {len(state['answers'])} questions answered.\n")
    for concept in state["concepts"]:
        print(f"  {concept['name']}")
        print(f"    {concept['description']}")
        for feature in concept["key_features"]:
            print(f"      - {feature['name']}: {feature['description']}")
        print()

    outputs = Path("outputs")
    outputs.mkdir(exist_ok=True)
    path = outputs / f"concepts-{session_id}.json"
    with open(path, "w") as f:
        json.dump({"idea": args.idea, "answers": state["answers"], "concepts": state["concepts"]}, f, indent=2)
    print(f"  Saved to {path}")

    print(f"""
  ┌─────────────────────────────────────────────┐
  │  Open {base:<38} │
  │  to run an interview in the browser.         │
  └─────────────────────────────────────────────┘
""")


if __name__ == "__main__":
    main()
