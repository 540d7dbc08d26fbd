#!/usr/bin/env python3
"""統一的檢查腳本，依序執行格式化檢查、靜態分析與測試。

1. Black 格式化
2. isort 匯入排序
3. Ruff 靜態檢查
4. Pylint 靜態分析
5. pytest 單元測試

設定集中在 pyproject.toml。
"""

from pathlib import Path
import subprocess
import sys

PACKAGES = ["core", "infrastructure", "main.py"]

COMMANDS = [
    (["python", "-m", "black", ".", "--check"], "Black"),
    (["python", "-m", "isort", ".", "--check-only"], "isort"),
    (["python", "-m", "ruff", "check", "."], "Ruff"),
    (["python", "-m", "pylint", *PACKAGES], "Pylint"),
    (["python", "-m", "pytest", "-q"], "pytest"),
]


def run_command(cmd: list[str], description: str) -> tuple[bool, str]:
    """執行命令並返回成功狀態和輸出。"""
    print(f"\n{'=' * 60}\n{description}: {' '.join(cmd)}\n{'=' * 60}")
    try:
        result = subprocess.run(
            cmd, capture_output=True, text=True, check=False, cwd=Path(__file__).parent
        )
    except OSError as e:
        print(f"❌ 執行錯誤: {e}")
        return False, str(e)

    output = result.stdout + result.stderr
    success = result.returncode == 0
    print("✅ 成功" if success else "❌ 失敗")
    if output.strip():
        print(output)
    return success, output


def main() -> None:
    """依序執行所有檢查並以結束碼回報結果。"""
    results = [(desc, run_command(cmd, desc)[0]) for cmd, desc in COMMANDS]

    print(f"\n{'=' * 60}\n總結報告\n{'=' * 60}")
    for description, success in results:
        print(f"{description}: {'✅ 通過' if success else '❌ 失敗'}")

    all_passed = all(success for _, success in results)
    print(f"\n整體結果: {'✅ 全部通過' if all_passed else '❌ 有錯誤'}")
    sys.exit(0 if all_passed else 1)


if __name__ == "__main__":
    main()
