"""
CLI Interface for the App Concept Interviewer

Runs the same interview as the web app inside a terminal.
"""

import argparse
import json
import sys
from pathlib import Path

from .agents.concept_agent import ConceptInterviewAgent, create_concept_agent
from .config import Settings, configure_logging
from .schemas.conversation import Stage


def print_header():
    """Print CLI header."""
    print("""
╔═══════════════════════════════════════════════════════════════╗
║                                                               ║
║     APP CONCEPT INTERVIEWER                                   ║
║                                                               ║
║     Describe an app, answer a few questions, get concepts     ║
║                                                               ║
╚═══════════════════════════════════════════════════════════════╝
    """)


def format_choices(agent: ConceptInterviewAgent) -> str:
    lines = []
    for i, choice in enumerate(agent.state.choices, 1):
        mark = "x" if choice.selected else " "
        lines.append(f"  [{mark}] {i}. {choice.label}")
    return "\n".join(lines)


def format_status(agent: ConceptInterviewAgent) -> str:
    state = agent.state
    return (
        f"{'─'*60}\n"
        f"Question {state.question_count}/{agent.config.max_rounds}  |  {state.progress}% ready\n"
        f"{'─'*60}"
    )


def print_notice(agent: ConceptInterviewAgent):
    notice = agent.state.notice
    if notice:
        print(f"\n⚠️  {notice['message']}")


def parse_selection(text: str, count: int) -> list[int]:
    """Turn '1, 3 4' into zero-based indexes; anything out of range is dropped."""
    indexes = []
    for part in text.replace(",", " ").split():
        if part.isdigit() and 1 <= int(part) <= count:
            indexes.append(int(part) - 1)
    return indexes


def run_interactive_interview(agent: ConceptInterviewAgent) -> bool:
    """Run an interactive interview session in the terminal."""
    while agent.stage == Stage.INITIAL:
        idea = input("\nWhat kind of app would you like to create? ").strip()
        if idea.lower() == "quit":
            return False
        print("Thinking...")
        if not agent.submit_prompt(idea):
            print_notice(agent)

    while agent.stage == Stage.IN_PROGRESS:
        print(f"\n{format_status(agent)}")
        print(f"\n{agent.state.current_question}\n")
        print(format_choices(agent))
        print("\nToggle options by number, 'more' for more options, Enter to continue, 'quit' to stop.")

        command = input("> ").strip()
        lowered = command.lower()

        if lowered == "quit":
            return False

        if lowered == "more":
            added = agent.request_more_options()
            if added:
                print(f"Added {added} options.")
            else:
                print_notice(agent)
            continue

        if lowered == "":
            if not agent.state.selected:
                print("Select at least one option first.")
                continue
            if agent.state.question_count >= agent.config.max_rounds - 1:
                print("\nYour app concepts are being built...")
            if not agent.submit_selections():
                print_notice(agent)
            continue

        for index in parse_selection(command, len(agent.state.choices)):
            agent.toggle_choice(agent.state.choices[index].label)

    print(f"""
╔═══════════════════════════════════════════════════════════════╗
║                    INTERVIEW COMPLETE!                        ║
╚═══════════════════════════════════════════════════════════════╝
""")
    print(agent.concepts_markdown())
    return True


def save_results(agent: ConceptInterviewAgent, output_dir: str) -> str:
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    filepath = output_path / "app_concepts.json"
    with open(filepath, 'w') as f:
        json.dump(agent.get_summary(), f, indent=2)

    (output_path / "app_concepts.md").write_text(agent.concepts_markdown())
    return str(filepath)


def main():
    """Main CLI entry point."""
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(
        description="App Concept Interviewer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Interview using whichever provider has credentials
  concept-interview

  # Use Groq with a shorter interview
  concept-interview --provider groq --max-rounds 3

  # Go through a running web app's /api/llm route
  concept-interview --provider proxy --proxy-url http://localhost:5001/api/llm
        """
    )

    parser.add_argument(
        "--provider", "-p",
        choices=["openai", "groq", "proxy"],
        default=settings.provider,
        help="LLM provider (default: first configured)"
    )
    parser.add_argument("--model", "-m", default=settings.model, help="Model name")
    parser.add_argument("--proxy-url", default=settings.proxy_url, help="URL of a /api/llm route")
    parser.add_argument(
        "--max-rounds",
        type=int,
        default=settings.max_rounds,
        help=f"Number of interview rounds (default: {settings.max_rounds})"
    )
    parser.add_argument(
        "--no-classify",
        action="store_true",
        help="Skip the check that the opening prompt is a concrete app idea"
    )
    parser.add_argument(
        "--output", "-o",
        help="Directory to write app_concepts.json and app_concepts.md"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args()

    settings.provider = args.provider
    settings.model = args.model
    settings.proxy_url = args.proxy_url
    settings.max_rounds = args.max_rounds
    if args.no_classify:
        settings.classify_prompt = False

    configure_logging("DEBUG" if args.verbose else "WARNING")
    print_header()

    try:
        agent = create_concept_agent(settings)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if not agent.gateway.llm.is_available:
        print("Error: no LLM provider configured. Set OPENAI_API_KEY, GROQ_API_KEY or LLM_PROXY_URL.")
        sys.exit(1)

    try:
        completed = run_interactive_interview(agent)
    except (KeyboardInterrupt, EOFError):
        print("\nInterview cancelled.")
        sys.exit(130)

    if completed and args.output:
        filepath = save_results(agent, args.output)
        print(f"\nSaved: {filepath}")


if __name__ == "__main__":
    main()
