import pytest

from Utils.Arvore import (
    MontarArvore,
    AchatarArvoreVisivel,
    AlternarExpansao,
    ColetarDescendentes,
    CalcularTrocaOrdem,
    EhDescendente,
)


def _Conta(id, pai=None, ordem=0, tipo='revenue'):
    return {"id": id, "parent_account_id": pai, "display_order": ordem, "type": tipo}


@pytest.fixture
def contas():
    #  A (total)          D (expense)
    #  ├─ B
    #  │  └─ B1
    #  └─ C
    return [
        _Conta("D", ordem=1, tipo='expense'),
        _Conta("A", ordem=0, tipo='total'),
        _Conta("C", pai="A", ordem=2),
        _Conta("B", pai="A", ordem=1),
        _Conta("B1", pai="B", ordem=0),
    ]


def test_montar_arvore_ordena_raizes_e_filhos(contas):
    raizes = MontarArvore(contas)
    assert [r["conta"]["id"] for r in raizes] == ["A", "D"]
    assert [f["conta"]["id"] for f in raizes[0]["filhos"]] == ["B", "C"]
    assert raizes[0]["filhos"][0]["filhos"][0]["conta"]["id"] == "B1"


def test_conta_com_pai_fora_da_lista_vira_raiz():
    raizes = MontarArvore([_Conta("X", pai="inexistente")])
    assert [r["conta"]["id"] for r in raizes] == ["X"]


def test_linhas_visiveis_seguem_a_expansao(contas):
    raizes = MontarArvore(contas)

    recolhida = AchatarArvoreVisivel(raizes, set())
    assert [l["conta"]["id"] for l in recolhida] == ["A", "D"]
    assert recolhida[0]["tem_filhos"] is True
    assert recolhida[0]["expandida"] is False

    expandida = AchatarArvoreVisivel(raizes, {"A", "B"})
    assert [(l["conta"]["id"], l["nivel"]) for l in expandida] == [
        ("A", 0), ("B", 1), ("B1", 2), ("C", 1), ("D", 0)
    ]


def test_filtro_de_tipo_vale_para_as_raizes(contas):
    raizes = MontarArvore(contas)
    linhas = AchatarArvoreVisivel(raizes, {"A"}, tipo='total')
    # Filhos de A são 'revenue' mas aparecem porque a raiz passou no filtro
    assert [l["conta"]["id"] for l in linhas] == ["A", "B", "C"]
    assert [l["conta"]["id"] for l in AchatarArvoreVisivel(raizes, set(), tipo='expense')] == ["D"]


def test_alternar_expansao_nao_altera_o_original():
    original = {"A"}
    assert AlternarExpansao(original, "B") == {"A", "B"}
    assert AlternarExpansao(original, "A") == set()
    assert original == {"A"}


def test_descendentes_sao_o_fecho_transitivo(contas):
    assert sorted(ColetarDescendentes(contas, "A")) == ["B", "B1", "C"]
    assert ColetarDescendentes(contas, "D") == []
    assert EhDescendente(contas, "B1", "A")
    assert not EhDescendente(contas, "A", "B1")


def test_troca_de_ordem_entre_irmaos(contas):
    assert CalcularTrocaOrdem(contas, "C", "up") == {"C": 1, "B": 2}
    assert CalcularTrocaOrdem(contas, "B", "down") == {"B": 2, "C": 1}


def test_troca_de_ordem_nas_pontas_nao_faz_nada(contas):
    assert CalcularTrocaOrdem(contas, "B", "up") == {}
    assert CalcularTrocaOrdem(contas, "C", "down") == {}
    assert CalcularTrocaOrdem(contas, "B1", "up") == {}


def test_direcao_invalida(contas):
    with pytest.raises(ValueError):
        CalcularTrocaOrdem(contas, "B", "left")
