#!/usr/bin/env python3
"""
Guess The Child - AI Slideshow

Main application launcher for the Guess The Child slideshow tool.
Provides a Gradio web interface for uploading photo pairs, captioning them
with Gemini and presenting them as a reveal-style slideshow.

Usage:
    API_KEY=... python app.py
    API_KEY=... python app.py --port 8080 --config settings.json

Features:
    - Childhood/current photo pairs per person
    - Gemini-written witty captions, generated one person at a time
    - Reveal-style slideshow with next/previous navigation
"""

import sys
import argparse
import logging
from pathlib import Path

from dotenv import load_dotenv

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from guess_the_child.adapters.gemini_captioner import GeminiCaptioner
from guess_the_child.core.config import AppConfig, MissingCredentialError
from guess_the_child.core.media import ImageProcessor
from guess_the_child.core.pipeline import CaptionPipeline
from guess_the_child.ui.app import GuessTheChildUI


def setup_logging(verbose: bool = False) -> None:
    """Set up logging configuration.

    Args:
        verbose: Enable verbose logging
    """
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler('guess_the_child.log', mode='a')
        ]
    )

    # Reduce noise from some libraries
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('google_genai').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)
    logging.getLogger('gradio').setLevel(logging.WARNING)


def print_startup_info(model: str, port: int) -> None:
    """Print startup information and instructions.

    Args:
        model: Gemini model used for captions
        port: Server port
    """
    print("\n" + "="*60)
    print("👶 Guess The Child - AI Slideshow")
    print("="*60)
    print(f"🤖 Caption model: {model}")
    print(f"🌐 Server port: {port}")
    print("\n🚀 Starting web interface...")
    print(f"   Open your browser to: http://localhost:{port}")
    print("\n💡 Quick Start:")
    print("   1. Upload a childhood photo and a current photo")
    print("   2. Click 'Add Person' (repeat for everyone)")
    print("   3. Click 'Generate & Start'")
    print("   4. Click to reveal, then use ‹ › to move between slides")
    print("="*60 + "\n")


def check_dependencies() -> bool:
    """Check if required dependencies are available.

    Returns:
        True if all critical dependencies are available
    """
    missing_deps = []

    try:
        import gradio
    except ImportError:
        missing_deps.append("gradio")

    try:
        import PIL
    except ImportError:
        missing_deps.append("pillow")

    try:
        from google import genai
    except ImportError:
        missing_deps.append("google-genai")

    try:
        import ulid
    except ImportError:
        missing_deps.append("python-ulid")

    if missing_deps:
        print(f"❌ Missing required dependencies: {', '.join(missing_deps)}")
        print("Please install them using:")
        print("   pip install -e .")
        return False

    return True


def build_app(config: AppConfig) -> GuessTheChildUI:
    """Wire the captioner, pipeline and UI together.

    Raises:
        MissingCredentialError: If no API key is configured
    """
    captioner = GeminiCaptioner(config.api_key(), model_name=config.model)
    pipeline = CaptionPipeline(
        captioner,
        model=config.model,
        prompt=config.prompt,
        image_processor=ImageProcessor(config.preview_size),
    )
    return GuessTheChildUI(pipeline)


def main() -> int:
    """Main application entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = argparse.ArgumentParser(
        description="Guess The Child - AI Slideshow",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    API_KEY=... python app.py
    API_KEY=... python app.py --port 8080 --verbose
    API_KEY=... python app.py --config settings.json --model gemini-2.5-pro

The API key may also be given as GEMINI_API_KEY or placed in a .env file.
        """
    )

    parser.add_argument(
        "--port",
        type=int,
        default=7860,
        help="Port for web interface (default: 7860)"
    )

    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host for web interface (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Optional JSON file overriding caption model and prompt"
    )

    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Gemini model for captions (default: gemini-2.5-flash)"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--share",
        action="store_true",
        help="Create public Gradio link (use with caution)"
    )

    args = parser.parse_args()

    # Set up logging
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        # Check dependencies
        if not check_dependencies():
            return 1

        load_dotenv()

        config = AppConfig(Path(args.config) if args.config else None)
        config.load()
        if args.model:
            config.set("captioning.model", args.model)

        # Missing credential is fatal: nothing is built without it
        try:
            ui = build_app(config)
        except MissingCredentialError as e:
            logger.error(f"Missing credential: {e}")
            print(f"\n❌ {e}")
            print("   Set API_KEY (or GEMINI_API_KEY) to your Gemini API key and try again.")
            return 1

        # Print startup info
        print_startup_info(config.model, args.port)

        # Build interface
        logger.info("Building Gradio interface...")
        interface = ui.build_interface()

        # Launch application
        logger.info(f"Launching web interface on {args.host}:{args.port}")
        interface.launch(
            server_name=args.host,
            server_port=args.port,
            share=args.share,
            show_error=True,
            quiet=not args.verbose
        )

        return 0

    except KeyboardInterrupt:
        logger.info("Application stopped by user")
        return 0

    except Exception as e:
        logger.error(f"Application failed to start: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()

        print(f"\n❌ Failed to start Guess The Child: {e}")
        print("\n🔧 Troubleshooting:")
        print("   1. Check that all dependencies are installed:")
        print("      pip install -e .")
        print("   2. Check that API_KEY holds a valid Gemini API key")
        print("   3. Run with --verbose for detailed error information")
        print("   4. Check the log file: guess_the_child.log")

        return 1


if __name__ == "__main__":
    sys.exit(main())
