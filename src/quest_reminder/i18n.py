from __future__ import annotations

from typing import Final

SUPPORTED_LANGUAGES: Final[set[str]] = {"en", "pt"}

MESSAGES: Final[dict[str, dict[str, str]]] = {
    "en": {
        "notification_quest_title": "Quest reminder",
        "notification_quest_body": "Don't forget: {title}",
        "daily_complete": "All daily quests done! Daily streak: {streak} 🔥",
        "weekly_complete": "All weekly quests done! Weekly streak: {streak} ⚡",
        "daily_quests": "Daily quests",
        "weekly_quests": "Weekly quests",
        "daily_streak": "Daily streak",
        "weekly_streak": "Weekly streak",
        "no_quests": "No quests due. Add one with /add daily|weekly <title>.",
        "quest_added": "Quest added: {title} [{ref}]",
        "quest_updated": "Quest updated: {title}",
        "quest_done": "Completed: {title}",
        "quest_undone": "Marked as not done: {title}",
        "quest_rescheduled": "Next occurrence: {date}",
        "quest_deleted": "Moved to trash: {title}",
        "quest_restored": "Restored: {title}",
        "quest_purged": "Deleted permanently: {title}",
        "quest_not_found": "Quest not found: {ref}",
        "archive_empty": "Archive is empty.",
        "archive_title": "Archive:",
        "trash_empty": "Trash is empty.",
        "trash_title": "Trash:",
        "add_usage": "Usage: /add daily|weekly <title> [| notes]",
        "edit_usage": "Usage: /edit <id> <title> [| notes]",
        "options_hint": "Options: every:{every} icon:{icons} on:YYYY-MM-DD",
        "ref_usage": "Usage: /{command} <id>",
        "bug_usage": "Usage: /bug <title> | <description>",
        "bug_report_success": "Thanks! Your bug report was sent.",
        "bug_report_error_submit": "Could not send the bug report. Please try again.",
        "bug_report_error_missing_access_key": "Bug reporting is not configured.",
        "bug_report_error_empty": "Both a title and a description are required.",
        "bug_report_retry": "Your report was kept, resend it with:\n/bug {title} | {description}",
        "lang_show": "Current language: {code}. Supported: en, pt.",
        "lang_set": "Language set to {code}.",
        "start": "Quest reminder is ready. Use /add to create a quest and /quests to see today's list.",
        "not_owner": "This bot is bound to another chat.",
    },
    "pt": {
        "notification_quest_title": "Lembrete de quest",
        "notification_quest_body": "Não te esqueças: {title}",
        "daily_complete": "Todas as quests diárias feitas! Sequência diária: {streak} 🔥",
        "weekly_complete": "Todas as quests semanais feitas! Sequência semanal: {streak} ⚡",
        "daily_quests": "Quests diárias",
        "weekly_quests": "Quests semanais",
        "daily_streak": "Sequência diária",
        "weekly_streak": "Sequência semanal",
        "no_quests": "Sem quests para hoje. Adiciona com /add daily|weekly <título>.",
        "quest_added": "Quest adicionada: {title} [{ref}]",
        "quest_updated": "Quest atualizada: {title}",
        "quest_done": "Concluída: {title}",
        "quest_undone": "Marcada como por fazer: {title}",
        "quest_rescheduled": "Próxima ocorrência: {date}",
        "quest_deleted": "Movida para o lixo: {title}",
        "quest_restored": "Restaurada: {title}",
        "quest_purged": "Apagada permanentemente: {title}",
        "quest_not_found": "Quest não encontrada: {ref}",
        "archive_empty": "O arquivo está vazio.",
        "archive_title": "Arquivo:",
        "trash_empty": "O lixo está vazio.",
        "trash_title": "Lixo:",
        "add_usage": "Uso: /add daily|weekly <título> [| notas]",
        "edit_usage": "Uso: /edit <id> <título> [| notas]",
        "options_hint": "Opções: every:{every} icon:{icons} on:AAAA-MM-DD",
        "ref_usage": "Uso: /{command} <id>",
        "bug_usage": "Uso: /bug <título> | <descrição>",
        "bug_report_success": "Obrigado! O teu relatório foi enviado.",
        "bug_report_error_submit": "Não foi possível enviar o relatório. Tenta novamente.",
        "bug_report_error_missing_access_key": "O envio de relatórios não está configurado.",
        "bug_report_error_empty": "O título e a descrição são obrigatórios.",
        "bug_report_retry": "O relatório foi guardado, reenvia com:\n/bug {title} | {description}",
        "lang_show": "Idioma atual: {code}. Suportados: en, pt.",
        "lang_set": "Idioma alterado para {code}.",
        "start": "O quest reminder está pronto. Usa /add para criar uma quest e /quests para ver a lista de hoje.",
        "not_owner": "Este bot está associado a outro chat.",
    },
}


def normalize_language_code(raw: str | None, default: str = "en") -> str:
    value = (raw or "").strip().lower()
    if value.startswith("pt"):
        return "pt"
    if value.startswith("en"):
        return "en"
    return default if default in SUPPORTED_LANGUAGES else "en"


def t(key: str, lang: str = "en", **kwargs: object) -> str:
    code = normalize_language_code(lang, default="en")
    template = MESSAGES.get(code, {}).get(key) or MESSAGES["en"].get(key) or key
    try:
        return template.format(**kwargs)
    except (KeyError, IndexError, ValueError):
        return template
