"""Advisor system prompt construction.

Renders the effective business context, the business type and the
requested category into a single system prompt in the user's language.
The prompt also instructs the model to emit a leading TITLE: line and a
trailing ```json table directive, which output_extractor parses back out.
"""

from src.services.context_merger import BusinessContext
from src.utils.locale import Locale

_ROLES = {
    Locale.en: {
        "owner": "business owner",
        "marketer": "marketer",
        "accountant": "accountant",
        "beginner": "beginning entrepreneur",
    },
    Locale.ru: {
        "owner": "владелец бизнеса",
        "marketer": "маркетолог",
        "accountant": "бухгалтер",
        "beginner": "начинающий предприниматель",
    },
}

_STAGES = {
    Locale.en: {
        "startup": "just starting out",
        "stable": "has stable income",
        "scaling": "wants to scale",
    },
    Locale.ru: {
        "startup": "только запускается",
        "stable": "имеет стабильный доход",
        "scaling": "хочет масштабироваться",
    },
}

_GOALS = {
    Locale.en: {
        "increase_revenue": "increase revenue",
        "reduce_costs": "reduce costs",
        "hire_staff": "hire staff",
        "launch_ads": "launch advertising",
        "legal_help": "solve a legal issue",
    },
    Locale.ru: {
        "increase_revenue": "увеличить выручку",
        "reduce_costs": "сократить расходы",
        "hire_staff": "нанять сотрудников",
        "launch_ads": "запустить рекламу",
        "legal_help": "решить юридический вопрос",
    },
}

_TEMPLATES = {
    Locale.en: {
        "intro": "You are an experienced business consultant helping small business owners.",
        "role": "The user is a {}.",
        "stage": "Business stage: {}.",
        "business_type": "The user owns a business in: {}.",
        "niche": "Niche: {}.",
        "goal": "Current request goal: {}.",
        "region": "Region: {}. Consider local legislation and market characteristics.",
        "urgent": "This is an urgent question, requires a quick practical answer.",
        "style": "Answer professionally and clearly. Give practical, actionable advice considering the user's context.",
        "tables": (
            "If the user requests a table or file report (e.g. Excel or CSV), "
            "build the table as text (in format | col | col | col |) for display in the response. "
            "If the user did not request a table, do not provide one."
        ),
        "title": (
            "At the BEGINNING of your response, on a separate line, output a brief dialogue "
            "title in format `TITLE: <brief title>`, then a blank line and then the main answer."
        ),
        "directive": (
            "If there is a table in the response, at the END of the response add a JSON "
            "instruction in a ```json block with exact schema: "
            '{"output_format": "xlsx" or "csv", "table": {"headers": ["header1", ...], '
            '"rows": [["value1", ...], ...]}}. '
            "Use \"csv\" if the user mentions CSV, .csv or comma-separated; otherwise use \"xlsx\". "
            "The JSON block must be the last thing in the response. "
            "All values in rows must be strings, and every row must have as many "
            "columns as there are headers."
        ),
        "language": "Answer the user in English.",
        "categories": {
            "legal": "Consult on legal matters: registration, taxes, contracts, labor law. Important: clarify that these are general recommendations and legal consultation is needed.",
            "marketing": "Help with marketing: promotion, SMM, targeting, branding, analytics. Give specific tools and strategies.",
            "finance": "Consult on finances: accounting, planning, expense optimization, tax optimization. Offer practical financial management methods.",
        },
        "default_category": "Help with general business questions: management, hiring, scaling, customer service.",
    },
    Locale.ru: {
        "intro": "Ты - опытный бизнес-консультант, помогающий владельцам малого бизнеса.",
        "role": "Пользователь - {}.",
        "stage": "Этап бизнеса: {}.",
        "business_type": "Сфера бизнеса: {}.",
        "niche": "Ниша: {}.",
        "goal": "Цель текущего запроса: {}.",
        "region": "Регион: {}. Учитывай местные особенности законодательства и рынка.",
        "urgent": "Это срочный вопрос, требуется быстрый практический ответ.",
        "style": "Отвечай профессионально и доступно. Давай практические, реализуемые советы с учетом контекста пользователя.",
        "tables": "Если пользователь не просил таблицу, не выдавай её.",
        "title": (
            "В НАЧАЛЕ ответа отдельной строкой выведи краткий заголовок диалога в формате "
            "`TITLE: <краткий заголовок>`, затем пустую строку и далее основной ответ."
        ),
        "directive": (
            "Если в ответе есть таблица, в КОНЦЕ ответа добавь JSON-инструкцию в блоке ```json "
            'с точной схемой: {"output_format": "xlsx" или "csv", "table": {"headers": '
            '["заголовок1", ...], "rows": [["значение1", ...], ...]}}. '
            "Используй \"csv\", если пользователь упоминает CSV, .csv или comma-separated, иначе \"xlsx\". "
            "Блок JSON должен быть последним в ответе. "
            "Все значения в rows должны быть строками, а количество столбцов в каждой "
            "строке должно совпадать с количеством заголовков."
        ),
        "language": "Отвечай пользователю на русском языке.",
        "categories": {
            "legal": "Консультируй по юридическим вопросам: регистрация, налоги, договоры, трудовое право. Важно: уточняй, что это общие рекомендации и нужно консультироваться с юристом.",
            "marketing": "Помогай с маркетингом: продвижение, SMM, таргетинг, брендинг, аналитика. Давай конкретные инструменты и стратегии с учетом ниши и этапа бизнеса.",
            "finance": "Консультируй по финансам: учет, планирование, оптимизация расходов, налоговая оптимизация. Предлагай практические методы финансового управления.",
        },
        "default_category": "Помогай с общими бизнес-вопросами: управление, найм, масштабирование, клиентский сервис.",
    },
}


def build_system_prompt(
    category: str,
    business_type: str,
    context: BusinessContext,
    locale: Locale = Locale.en,
) -> str:
    """Build the advisor system prompt.

    Args:
        category: 'legal', 'marketing', 'finance' or anything else for general.
        business_type: Free-form business description.
        context: Effective (merged) business context.
        locale: Prompt and answer language.

    Returns:
        The system prompt string.
    """
    t = _TEMPLATES[locale]
    parts = [t["intro"]]

    if context.user_role:
        parts.append(t["role"].format(_ROLES[locale].get(context.user_role, _ROLES[locale]["owner"])))
    if context.business_stage:
        parts.append(t["stage"].format(_STAGES[locale].get(context.business_stage, _STAGES[locale]["stable"])))
    parts.append(t["business_type"].format(business_type))
    if context.business_niche:
        parts.append(t["niche"].format(context.business_niche))
    if context.goal:
        parts.append(t["goal"].format(_GOALS[locale].get(context.goal, context.goal)))
    if context.region:
        parts.append(t["region"].format(context.region))
    if context.urgency == "urgent":
        parts.append(t["urgent"])

    parts.extend([t["style"], t["tables"], t["title"], t["directive"], t["language"]])
    parts.append(t["categories"].get(category, t["default_category"]))
    return " ".join(parts)
