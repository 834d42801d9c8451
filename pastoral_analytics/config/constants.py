from __future__ import annotations

MONTHS = [
    "Janeiro",
    "Fevereiro",
    "Março",
    "Abril",
    "Maio",
    "Junho",
    "Julho",
    "Agosto",
    "Setembro",
    "Outubro",
    "Novembro",
    "Dezembro",
]

REPORT_TYPE_LABELS = {"month": "Mensal", "year": "Anual"}

SECTION_DELIMITER = "|||"
RECENT_ACTIVITY_SAMPLE = 5

# Narrative fallbacks, keyed by section in delimiter order.
SECTION_KEYS = [
    "presentation_script",
    "executive_summary",
    "trends_and_anomalies",
    "strategic_recommendations",
]

PARSE_FALLBACKS = {
    "presentation_script": "Roteiro indisponível.",
    "executive_summary": "Resumo indisponível.",
    "trends_and_anomalies": "Análise indisponível.",
    "strategic_recommendations": "Recomendações indisponíveis.",
}

MISSING_CREDENTIAL_TEXT = {
    "raw_text": "Erro: API Key não configurada.",
    "presentation_script": "Não foi possível gerar o roteiro. Chave de API ausente ou inválida.",
    "executive_summary": "Não foi possível gerar o resumo. Chave de API não configurada.",
    "trends_and_anomalies": "Indisponível: chave de API não configurada.",
    "strategic_recommendations": "Indisponível: chave de API não configurada.",
}

INSUFFICIENT_DATA_TEXT = {
    "presentation_script": "Não há dados suficientes neste período para gerar um roteiro.",
    "executive_summary": "Nenhum registro encontrado para o período selecionado.",
    "trends_and_anomalies": "Sem dados para análise.",
    "strategic_recommendations": "Registre atividades para receber recomendações.",
}

SERVICE_FAILURE_TEXT = "Erro na geração da análise. Verifique a conexão e a chave de API."

PROMPT_TEMPLATE = """
Atue como um Analista de Dados Sênior e Consultor Estratégico da CADFC.
Sua tarefa é escrever um relatório de alta performance e um roteiro de apresentação oral.

DADOS DO PERÍODO ({period}):
{payload}

Gere uma resposta estruturada EXATAMENTE com as seguintes seções, separadas por "{delimiter}".
Use tom profissional, corporativo, direto e elegante. Não use markdown (negrito/itálico) dentro das seções, apenas texto puro.

Seção 1: ROTEIRO DE APRESENTAÇÃO
Escreva um discurso pronto para ser lido pelo líder na reunião. Deve ser envolvente, começar saudando os presentes, destacar as vitórias (números altos), reconhecer desafios (se houver) e terminar com uma mensagem motivacional baseada nos dados. Use 1ª pessoa do plural ("Nós").

{delimiter}

Seção 2: RESUMO EXECUTIVO
Um parágrafo denso e formal resumindo o desempenho geral do período. Foco em eficiência e crescimento.

{delimiter}

Seção 3: TENDÊNCIAS E ANOMALIAS
Analise a demografia (Homens vs Mulheres vs Adolescentes) e a frequência. Aponte se o engajamento online está alto ou baixo. Identifique padrões.

{delimiter}

Seção 4: RECOMENDAÇÕES ESTRATÉGICAS
3 ações práticas e numeradas para a liderança implementar no próximo período visando melhoria dos números.
"""

# Layout units are millimetres on a portrait A4 page, measured from the top.
PAGE_WIDTH = 210.0
PAGE_HEIGHT = 297.0
MARGIN_X = 10.0
CONTENT_TOP = 45.0
CONTENT_BOTTOM = PAGE_HEIGHT - 15.0

METRICS_Y = 45.0
METRIC_BOX_WIDTH = 45.0
METRIC_BOX_HEIGHT = 25.0
METRIC_BOX_GAP = 5.0

DASHBOARD_WRAP_CHARS = 100
SCRIPT_WRAP_CHARS = 85
SECTION_LINE_HEIGHT = 5.0
SECTION_TEXT_OFFSET = 6.0
SECTION_SPACING = 12.0
SCRIPT_TOP = 60.0
SCRIPT_LINE_HEIGHT = 6.0

TABLE_TITLE_GAP = 5.0
TABLE_HEADER_HEIGHT = 8.0
TABLE_ROW_HEIGHT = 7.0
SECTION_AFTER_TABLE = 15.0
PAGE_BREAK_THRESHOLD = 60.0

GATHERING_COLUMNS = ["Data", "Tipo", "Homens", "Mulh.", "Jovens", "Crianças", "Online", "Total"]
ACTIVITY_COLUMNS = ["Data", "Tipo", "Descrição", "Local"]

FOOTER_TEXT = "CADFC Gestão Eclesiástica | Relatório Confidencial | Pág. {page}"
HEADER_TEXT = "CADFC - Relatório Oficial"
