# Reports/DreAgregacao.py
"""
Motor de agregação do DRE por período.

Para cada conta modelo visível e para cada mês da janela móvel de 12 meses,
soma os dados brutos da empresa:
    - categoria de receita  -> +valor
    - categoria de despesa  -> -valor
    - sem categoria (indicador) -> +valor (repasse)

Obs: o cálculo parte do tipo da categoria dos dados brutos e NÃO usa os
componentes/pesos configurados no modelo.
"""

MESES = [
    'Janeiro', 'Fevereiro', 'Março', 'Abril', 'Maio', 'Junho',
    'Julho', 'Agosto', 'Setembro', 'Outubro', 'Novembro', 'Dezembro'
]

ABREVIACOES_MESES = {
    'Janeiro': 'Jan', 'Fevereiro': 'Fev', 'Março': 'Mar', 'Abril': 'Abr',
    'Maio': 'Mai', 'Junho': 'Jun', 'Julho': 'Jul', 'Agosto': 'Ago',
    'Setembro': 'Set', 'Outubro': 'Out', 'Novembro': 'Nov', 'Dezembro': 'Dez'
}

FAVORAVEL = 'favoravel'
DESFAVORAVEL = 'desfavoravel'


def NormalizarMes(mes):
    """Aceita o nome do mês ou o número (1-12) e devolve o nome."""
    if isinstance(mes, int) or (isinstance(mes, str) and mes.isdigit()):
        numero = int(mes)
        if not 1 <= numero <= 12:
            raise ValueError(f"Mês inválido: {mes}")
        return MESES[numero - 1]
    if mes not in MESES:
        raise ValueError(f"Mês inválido: {mes}")
    return mes


def GerarJanelaDozeMeses(mes, ano):
    """
    Gera os 12 períodos (mes, ano) terminando no mês de referência.
    Ex: ('Março', 2024) -> [('Abril', 2023), ..., ('Março', 2024)]
    """
    idx_atual = MESES.index(NormalizarMes(mes))
    periodos = []
    for i in range(11, -1, -1):
        idx = idx_atual - i
        ano_periodo = ano
        if idx < 0:
            idx += 12
            ano_periodo -= 1
        periodos.append((MESES[idx], ano_periodo))
    return periodos


def ChavePeriodo(mes, ano):
    return f"{mes}-{ano}"


def ContribuicaoLinha(linha):
    """
    Valor com sinal de uma linha de dados brutos.
    linha: dict com 'valor' e opcionalmente 'categoria_tipo'.
    """
    valor = linha.get('valor') or 0
    tipo = linha.get('categoria_tipo')
    if tipo == 'revenue':
        return valor
    if tipo == 'expense':
        return -valor
    return valor


def CalcularValorConta(linhas):
    """Soma das contribuições das linhas de um período."""
    return sum(ContribuicaoLinha(l) for l in linhas)


def MontarTabelaDre(contas, dados_por_periodo):
    """
    Monta a tabela do DRE.

    Args:
        contas: lista de dicts de conta modelo (id, nome, simbolo, tipo, ordem_padrao)
        dados_por_periodo: lista ordenada de (mes, ano, linhas)

    Returns:
        Lista de linhas {conta_id, nome, simbolo, tipo, ordem, valores_mensais, total}.
    """
    tabela = []
    for conta in contas:
        valores_mensais = {}
        total = 0
        for mes, ano, linhas in dados_por_periodo:
            valor = CalcularValorConta(linhas)
            valores_mensais[ChavePeriodo(mes, ano)] = valor
            total += valor

        tabela.append({
            "conta_id": conta['id'],
            "nome": conta['nome'],
            "simbolo": conta.get('simbolo') or '=',
            "tipo": conta.get('tipo'),
            "ordem": conta.get('ordem_padrao'),
            "valores_mensais": valores_mensais,
            "total": total,
        })
    return tabela


def CorValor(valor, simbolo):
    """
    Convenção de cores do DRE:
    '+' e '=' -> positivo é favorável; '-' -> negativo (ou zero) é favorável.
    """
    if simbolo == '-':
        return FAVORAVEL if valor <= 0 else DESFAVORAVEL
    return FAVORAVEL if valor >= 0 else DESFAVORAVEL


def FormatarMoeda(valor):
    """Formata no padrão brasileiro: R$ 1.234,56"""
    negativo = valor < 0
    texto = f"{abs(valor):,.2f}".replace(',', 'X').replace('.', ',').replace('X', '.')
    return f"-R$ {texto}" if negativo else f"R$ {texto}"
