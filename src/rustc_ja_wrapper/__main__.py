# src/rustc_ja_wrapper/__main__.py
from rustc_ja_wrapper.presentation.cli.main import run

if __name__ == "__main__":
    run()
