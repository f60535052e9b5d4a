import pytest

from Reports.DreAgregacao import (
    MESES,
    NormalizarMes,
    GerarJanelaDozeMeses,
    ChavePeriodo,
    ContribuicaoLinha,
    CalcularValorConta,
    MontarTabelaDre,
    CorValor,
    FormatarMoeda,
    FAVORAVEL,
    DESFAVORAVEL,
)


def test_contribuicao_respeita_tipo_da_categoria():
    assert ContribuicaoLinha({"valor": 100, "categoria_tipo": "revenue"}) == 100
    assert ContribuicaoLinha({"valor": 100, "categoria_tipo": "expense"}) == -100
    # Linha de indicador (sem categoria) entra com o valor original
    assert ContribuicaoLinha({"valor": 100, "categoria_tipo": None}) == 100
    assert ContribuicaoLinha({"valor": 100}) == 100


def test_valor_do_mes_soma_as_contribuicoes():
    linhas = [
        {"valor": 1000, "categoria_tipo": "revenue"},
        {"valor": 300, "categoria_tipo": "expense"},
        {"valor": 50, "categoria_tipo": None},
    ]
    assert CalcularValorConta(linhas) == 750
    assert CalcularValorConta([]) == 0


def test_janela_termina_no_mes_de_referencia():
    janela = GerarJanelaDozeMeses('Março', 2024)
    assert len(janela) == 12
    assert janela[0] == ('Abril', 2023)
    assert janela[-1] == ('Março', 2024)
    assert janela[8] == ('Dezembro', 2023)
    assert janela[9] == ('Janeiro', 2024)


def test_janela_de_dezembro_fica_no_mesmo_ano():
    janela = GerarJanelaDozeMeses('Dezembro', 2024)
    assert janela == [(m, 2024) for m in MESES]


def test_normalizar_mes_aceita_numero_e_nome():
    assert NormalizarMes(3) == 'Março'
    assert NormalizarMes('12') == 'Dezembro'
    assert NormalizarMes('Maio') == 'Maio'
    with pytest.raises(ValueError):
        NormalizarMes(13)
    with pytest.raises(ValueError):
        NormalizarMes('Marco')


def test_tabela_tem_um_valor_por_mes_e_total_da_janela():
    contas = [
        {"id": "c1", "nome": "Receita Bruta", "simbolo": "+", "tipo": "simples", "ordem_padrao": 1},
        {"id": "c2", "nome": "Resultado", "simbolo": None, "tipo": "formula", "ordem_padrao": 2},
    ]
    periodos = GerarJanelaDozeMeses('Março', 2024)
    dados = [(m, a, []) for m, a in periodos]
    dados[-1] = ('Março', 2024, [{"valor": 500, "categoria_tipo": "revenue"}])
    dados[-2] = ('Fevereiro', 2024, [{"valor": 200, "categoria_tipo": "expense"}])

    tabela = MontarTabelaDre(contas, dados)

    assert [l["conta_id"] for l in tabela] == ["c1", "c2"]
    primeira = tabela[0]
    assert len(primeira["valores_mensais"]) == 12
    assert primeira["valores_mensais"][ChavePeriodo('Março', 2024)] == 500
    assert primeira["valores_mensais"][ChavePeriodo('Fevereiro', 2024)] == -200
    assert primeira["valores_mensais"][ChavePeriodo('Abril', 2023)] == 0
    assert primeira["total"] == 300
    # Sem símbolo cadastrado a linha é tratada como '='
    assert tabela[1]["simbolo"] == '='


def test_chave_periodo():
    assert ChavePeriodo('Março', 2024) == 'Março-2024'


@pytest.mark.parametrize("valor, simbolo, esperado", [
    (-100, '-', FAVORAVEL),
    (100, '-', DESFAVORAVEL),
    (0, '-', FAVORAVEL),
    (100, '+', FAVORAVEL),
    (-1, '+', DESFAVORAVEL),
    (0, '=', FAVORAVEL),
    (-5, '=', DESFAVORAVEL),
])
def test_cor_do_valor(valor, simbolo, esperado):
    assert CorValor(valor, simbolo) == esperado


def test_formatar_moeda_padrao_brasileiro():
    assert FormatarMoeda(1234.56) == "R$ 1.234,56"
    assert FormatarMoeda(-1234567.8) == "-R$ 1.234.567,80"
    assert FormatarMoeda(0) == "R$ 0,00"
