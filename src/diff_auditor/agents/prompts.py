"""Prompt templates for audit and summary completions."""

from diff_auditor.models import AuditRequest, SegmentResult

SUMMARY_EXCERPT_CHARS = 100

AUDIT_SYSTEM_PROMPT = """あなたはソフトウェア監査ツールです。与えられた「リクエスト」「変更内容」「差分」「function_list」「変更ファイル一覧」を確認し、下記の観点で監査してください：

【重要な監査観点】
1. 指示していない変更がないか（修正内容に記載されていない変更が行われていないか）
2. 既存機能が削除されていないか（特にfunction_list.txtに記載されている機能が失われていないか）
3. TODO / FIXME が残っていないか
4. 修正内容とコードの差分に整合性があるか（修正内容で述べられていることと実際のコード変更が一致しているか）
5. 修正内容に記載されている目的が適切に実装されているか

必ず以下の形式で監査レポートを作成してください：

# コード監査レポート

## 1. 指示していない変更
[指示していない変更の有無とその詳細を記載。なければ「指示していない変更は見つかりませんでした。」と記載]

## 2. 既存機能の削除
[既存機能が削除されていないか、特にfunction_list.txtに記載されている機能が失われていないか確認した結果を記載]

## 3. TODO/FIXME の残存
[TODO/FIXMEコメントの有無とその詳細を記載。なければ「残存しているTODO/FIXMEコメントは見つかりませんでした。」と記載]

## 4. 修正内容との整合性
[修正内容の説明と実際のコード変更が一致しているか詳細に分析した結果を記載]

## 5. 目的の実装状況
[修正内容に記載されている目的が適切に実装されているか詳細に確認した結果を記載]

## 6. 技術的問題点
[コード品質、パフォーマンス、セキュリティなどの技術的観点での問題点があれば箇条書きで指摘]
- 問題点1 [重要度: 高/中/低]
- 問題点2 [重要度: 高/中/低]
- ...

## 7. 総合評価
[監査全体の総合評価と、改善すべき重要な点を簡潔にまとめる]

## function_list.txt更新案
[今回の修正に関連してfunction_list.txtに追加・更新すべき内容。関数の振る舞いが正確に理解できるような詳細な説明と、変更されたプロンプトがある場合はそのプロンプトも含める]

上記の各セクションは必ず含め、具体的かつ詳細な情報を提供してください。特に修正内容との整合性と目的の実装状況については詳細に分析してください。"""

SUMMARY_SYSTEM_PROMPT = (
    "あなたはコード監査の専門家です。複数のファイル監査結果を統合して、全体の評価を提供してください。"
)

NO_FILES_LABEL = "（なし）"


def build_audit_messages(request: AuditRequest) -> list[dict[str, str]]:
    """Return the system/user message pair for one audit request."""
    changed = "\n".join(request.changed_files or []) or NO_FILES_LABEL
    user_content = (
        "\n"
        f"【リクエスト】:\n{request.request}\n\n"
        f"【修正内容の概要】:\n{request.modification_description}\n\n"
        f"【変更されたファイル】:\n{changed}\n\n"
        f"【function_list.txt の内容】:\n```\n{request.function_list}\n```\n\n"
        f"【コード差分】:\n```diff\n{request.code_changes}\n```\n"
    )
    return [
        {"role": "system", "content": AUDIT_SYSTEM_PROMPT},
        {"role": "user", "content": user_content},
    ]


def build_summary_messages(
    modification_description: str,
    results: list[SegmentResult],
) -> list[dict[str, str]]:
    """Return the messages for the cross-file summary completion.

    Each segment contributes only its first SUMMARY_EXCERPT_CHARS
    characters, which keeps this prompt bounded.
    """
    excerpts = "\n".join(
        f"- {result.file_path}: {result.completion[:SUMMARY_EXCERPT_CHARS]}..."
        for result in results
    )
    user_content = (
        "\n"
        "以下は、コード変更の各ファイルに対する監査結果です。"
        "これらの結果を総合的に分析し、変更全体に対する簡潔なサマリーを作成してください。\n"
        "問題点があれば箇条書きで指摘し、全体の評価を付けてください。\n\n"
        f"変更の概要: {modification_description}\n\n"
        f"ファイル監査結果:\n{excerpts}\n"
    )
    return [
        {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
        {"role": "user", "content": user_content},
    ]


def build_chat_prompt(request: AuditRequest) -> str:
    """Plain-text prompt for pasting into a chat assistant by hand."""
    changed = "\n".join(request.changed_files or [])
    return (
        "以下のコード変更を監査してください：\n\n"
        f"リクエスト内容：「{request.request}」\n"
        f"修正内容：「{request.modification_description}」\n"
        f"コード変更：\n```diff\n{request.code_changes}\n```\n\n"
        f"function_list.txtの内容：\n```\n{request.function_list}\n```\n\n"
        f"変更されたファイル：\n{changed}"
    )
