import sys

from ai_code_reviewer.logger import get_logger

logger = get_logger()


def main() -> int:
    logger.info("Starting AI Code Reviewer (local run; inputs are read from the environment and .env)")

    from ai_code_reviewer.main import main as run_review

    return run_review()


if __name__ == "__main__":
    sys.exit(main())
