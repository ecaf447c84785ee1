from __future__ import annotations

import argparse
import json
from pathlib import Path

from eduguide.engine import AdvisorEngine
from eduguide.models import AIResponse, ChatRequest, UserProfile


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Ask the EduGuide college advisor a question and print its reply."
    )
    parser.add_argument("message", help="What the student says (e.g. 'My GPA is 3.4 and I live in Texas')")
    parser.add_argument("--profile", type=Path, help="Path to a JSON profile accumulated from earlier turns")
    parser.add_argument("--name", help="Student name used in greetings")
    parser.add_argument(
        "--enrich",
        action="store_true",
        help="Add official-site research and LLM prose when API keys are configured",
    )
    parser.add_argument(
        "--mode",
        choices=["demo", "dashboard"],
        default="dashboard",
        help="Chat mode used with --enrich (default: dashboard)",
    )
    parser.add_argument("--json", action="store_true", help="Print the full JSON payload instead of the reply text")
    return parser.parse_args(argv)


def load_profile(path: Path | None) -> UserProfile:
    if path is None:
        return UserProfile()
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise SystemExit(f"{path} must contain a JSON object")
    return UserProfile.from_dict(data)


def format_reply(response: AIResponse) -> str:
    lines = [response.content]
    if response.colleges:
        lines.append("")
        lines.append("Matches:")
        for college in response.colleges:
            lines.append(f"  - {college.name} ({college.location}) | {college.type} | {college.tuition}")
    sources = getattr(response, "sources", None)
    if sources:
        lines.append("")
        lines.append("Sources:")
        for source in sources:
            lines.append(f"  - {source.title}: {source.url}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    profile = load_profile(args.profile)

    if args.enrich:
        from eduguide.services import ChatService

        request = ChatRequest(
            message=args.message,
            current_profile=profile,
            mode=args.mode,
            user_name=args.name,
        )
        response = ChatService().generate(request)
    else:
        response = AdvisorEngine().process_message(args.message, profile, args.name)

    if args.json:
        print(json.dumps(response.to_dict(), indent=2))
    else:
        print(format_reply(response))


if __name__ == "__main__":
    main()
