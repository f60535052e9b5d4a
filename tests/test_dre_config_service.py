import pytest

from Models.POSTGRESS.DreEstrutura import DreConfigConta, DreConfigContaEmpresa
from Models.POSTGRESS.DreModelo import ContaDreComponente
from Services.DreConfigService import (
    DreConfigService,
    ValidarFormularioConta,
    MontarDadosConta,
    TipoFormularioDaConta,
    FiltrarCategoriasFormulario,
    ContasTotalizaveis,
    ContasPai,
)


def _FormCategoria(nome, categorias, pai=None, tipo_categoria='revenue'):
    return {
        "name": nome,
        "tipo_formulario": "category",
        "tipo_categoria": tipo_categoria,
        "category_ids": categorias,
        "parent_account_id": pai,
    }


def _FormTotal(nome, contas):
    return {"name": nome, "tipo_formulario": "total", "selected_accounts": contas}


# ============================================================
# FORMULÁRIO (funções puras)
# ============================================================

def test_formulario_exige_nome_e_selecao_do_tipo():
    assert ValidarFormularioConta(_FormCategoria("Receita", ["c1"])) == []
    assert "Informe o nome da conta." in ValidarFormularioConta(_FormCategoria("  ", ["c1"]))
    assert ValidarFormularioConta(_FormCategoria("Receita", [])) == ["Selecione ao menos uma categoria."]
    assert ValidarFormularioConta({"name": "X", "tipo_formulario": "calculated"}) == ["Selecione um indicador."]
    assert ValidarFormularioConta(_FormTotal("T", [])) == ["Selecione ao menos uma conta para totalizar."]
    # Flex usa 'positive' quando o sinal não é informado
    assert ValidarFormularioConta({"name": "F", "tipo_formulario": "flex"}) == []
    assert ValidarFormularioConta({"name": "F", "tipo_formulario": "flex", "sign": "zero"}) == ["Sinal inválido."]


def test_montar_dados_mantem_so_a_referencia_do_tipo():
    dados = MontarDadosConta({
        "name": " Despesas ",
        "tipo_formulario": "category",
        "tipo_categoria": "expense",
        "category_ids": ["c1", "c2"],
        "indicator_id": "ind-1",
        "selected_accounts": ["x"],
        "sign": "negative",
    })
    assert dados["name"] == "Despesas"
    assert dados["type"] == "expense"
    assert dados["category_ids"] == ["c1", "c2"]
    assert dados["indicator_id"] is None
    assert dados["selected_accounts"] is None
    assert dados["sign"] is None

    flex = MontarDadosConta({"name": "Ajuste", "tipo_formulario": "flex"})
    assert flex["type"] == "flex"
    assert flex["sign"] == "positive"
    assert TipoFormularioDaConta({"type": "revenue"}) == "category"
    assert TipoFormularioDaConta({"type": "total"}) == "total"


def test_filtros_do_modal():
    categorias = [
        {"id": "1", "name": "Vendas", "type": "revenue"},
        {"id": "2", "name": "Aluguel", "type": "expense"},
        {"id": "3", "name": "Vendas Online", "type": "revenue"},
    ]
    assert [c["id"] for c in FiltrarCategoriasFormulario(categorias, "revenue", "ONLINE")] == ["3"]
    assert [c["id"] for c in FiltrarCategoriasFormulario(categorias, "expense")] == ["2"]

    contas = [{"type": "revenue"}, {"type": "total"}, {"type": "flex"}, {"type": "calculated"}]
    assert ContasTotalizaveis(contas) == [{"type": "revenue"}, {"type": "calculated"}]
    assert ContasPai(contas) == [{"type": "total"}, {"type": "flex"}]


# ============================================================
# SERVIÇO
# ============================================================

def test_salvar_sem_empresa_falha(db_session, cadastros):
    svc = DreConfigService(db_session)
    with pytest.raises(ValueError, match="Selecione uma empresa antes de criar ou editar uma conta"):
        svc.SalvarConta(_FormCategoria("Receita", [cadastros["vendas"]]), None)


def test_salvar_formulario_invalido_falha(db_session, cadastros):
    svc = DreConfigService(db_session)
    with pytest.raises(ValueError, match="Selecione ao menos uma categoria"):
        svc.SalvarConta(_FormCategoria("Receita", []), cadastros["alfa"])
    assert db_session.query(DreConfigConta).count() == 0


def test_inserir_conta_cria_vinculo_e_ordem(db_session, cadastros):
    svc = DreConfigService(db_session)
    primeira = svc.SalvarConta(_FormCategoria("Receita", [cadastros["vendas"]]), cadastros["alfa"])
    segunda = svc.SalvarConta(_FormCategoria("Despesa", [cadastros["aluguel"]], tipo_categoria='expense'), cadastros["alfa"])
    outra_empresa = svc.SalvarConta(_FormCategoria("Receita", [cadastros["vendas"]]), cadastros["beta"])
    db_session.commit()

    assert primeira["display_order"] == 0
    assert segunda["display_order"] == 1
    assert outra_empresa["display_order"] == 0
    assert primeira["is_active"] is True

    vinculo = db_session.query(DreConfigContaEmpresa).filter_by(account_id=primeira["id"]).one()
    assert vinculo.company_id == cadastros["alfa"]

    assert [c["name"] for c in svc.ListarContas(cadastros["alfa"])] == ["Receita", "Despesa"]
    assert [c["id"] for c in svc.ListarContas(cadastros["beta"])] == [outra_empresa["id"]]
    assert len(svc.ListarContas()) == 3


def test_editar_conta(db_session, cadastros):
    svc = DreConfigService(db_session)
    conta = svc.SalvarConta(_FormCategoria("Receita", [cadastros["vendas"]]), cadastros["alfa"])
    editada = svc.SalvarConta(
        {"name": "Receita Líquida", "tipo_formulario": "calculated", "indicator_id": cadastros["headcount"]},
        cadastros["alfa"],
        conta["id"],
    )
    assert editada["id"] == conta["id"]
    assert editada["type"] == "calculated"
    assert editada["category_ids"] == []
    assert editada["indicator_id"] == cadastros["headcount"]
    # Edição não cria novo vínculo
    assert db_session.query(DreConfigContaEmpresa).count() == 1


def test_editar_nao_permite_ciclo(db_session, cadastros):
    svc = DreConfigService(db_session)
    pai = svc.SalvarConta(_FormTotal("Total", ["x"]), cadastros["alfa"])
    filho = svc.SalvarConta(_FormCategoria("Receita", [cadastros["vendas"]], pai=pai["id"]), cadastros["alfa"])

    with pytest.raises(ValueError, match="não pode ser filha"):
        svc.SalvarConta({**_FormTotal("Total", ["x"]), "parent_account_id": filho["id"]}, cadastros["alfa"], pai["id"])
    with pytest.raises(ValueError, match="não pode ser filha"):
        svc.SalvarConta({**_FormTotal("Total", ["x"]), "parent_account_id": pai["id"]}, cadastros["alfa"], pai["id"])


def test_nome_exibicao_grava_componentes(db_session, cadastros):
    svc = DreConfigService(db_session)
    dados = {**_FormCategoria("Receita", [cadastros["vendas"], cadastros["servicos"]]), "nome_exibicao": "Faturamento"}
    conta = svc.SalvarConta(dados, cadastros["alfa"])

    componentes = db_session.query(ContaDreComponente).filter_by(conta_dre_modelo_id=conta["id"]).all()
    assert sorted(c.referencia_id for c in componentes) == sorted([cadastros["vendas"], cadastros["servicos"]])
    assert {c.nome_exibicao for c in componentes} == {"Faturamento"}

    # Salvar de novo atualiza, não duplica
    svc.SalvarConta({**dados, "nome_exibicao": "Receita Bruta"}, cadastros["alfa"], conta["id"])
    componentes = db_session.query(ContaDreComponente).filter_by(conta_dre_modelo_id=conta["id"]).all()
    assert len(componentes) == 2
    assert {c.nome_exibicao for c in componentes} == {"Receita Bruta"}


def test_arvore_da_empresa(db_session, cadastros):
    svc = DreConfigService(db_session)
    total = svc.SalvarConta(_FormTotal("Lucro", ["x"]), cadastros["alfa"])
    filho = svc.SalvarConta(_FormCategoria("Receita", [cadastros["vendas"]], pai=total["id"]), cadastros["alfa"])

    arvore = svc.ObterArvore(cadastros["alfa"], set(), 'all')
    assert [l["conta"]["id"] for l in arvore["linhas"]] == [total["id"]]
    assert [c["id"] for c in arvore["contas_pai"]] == [total["id"]]
    assert [c["id"] for c in arvore["contas_totalizaveis"]] == [filho["id"]]

    aberta = svc.ObterArvore(cadastros["alfa"], {total["id"]}, 'all')
    assert [(l["conta"]["id"], l["nivel"]) for l in aberta["linhas"]] == [(total["id"], 0), (filho["id"], 1)]

    with pytest.raises(ValueError):
        svc.ObterArvore(cadastros["alfa"], set(), 'qualquer')


def test_excluir_remove_exatamente_a_subarvore(db_session, cadastros):
    svc = DreConfigService(db_session)
    raiz = svc.SalvarConta(_FormTotal("Raiz", ["x"]), cadastros["alfa"])
    meio = svc.SalvarConta({**_FormTotal("Meio", ["x"]), "parent_account_id": raiz["id"]}, cadastros["alfa"])
    folha = svc.SalvarConta(_FormCategoria("Folha", [cadastros["vendas"]], pai=meio["id"]), cadastros["alfa"])
    outra = svc.SalvarConta(_FormCategoria("Outra", [cadastros["vendas"]]), cadastros["alfa"])
    db_session.commit()

    ids = svc.ExcluirConta(raiz["id"])
    db_session.commit()

    assert sorted(ids) == sorted([raiz["id"], meio["id"], folha["id"]])
    restantes = [c.id for c in db_session.query(DreConfigConta).all()]
    assert restantes == [outra["id"]]
    assert db_session.query(DreConfigContaEmpresa).count() == 1


def test_excluir_conta_inexistente(db_session):
    with pytest.raises(ValueError, match="Conta não encontrada"):
        DreConfigService(db_session).ExcluirConta("nao-existe")


def test_mover_conta_troca_com_o_irmao(db_session, cadastros):
    svc = DreConfigService(db_session)
    a = svc.SalvarConta(_FormCategoria("A", [cadastros["vendas"]]), cadastros["alfa"])
    b = svc.SalvarConta(_FormCategoria("B", [cadastros["vendas"]]), cadastros["alfa"])
    c = svc.SalvarConta(_FormCategoria("C", [cadastros["vendas"]]), cadastros["alfa"])

    assert svc.MoverConta(c["id"], 'up', cadastros["alfa"]) == {c["id"]: 1, b["id"]: 2}
    assert [x["name"] for x in svc.ListarContas(cadastros["alfa"])] == ["A", "C", "B"]

    # Nas pontas nada muda
    assert svc.MoverConta(a["id"], 'up', cadastros["alfa"]) == {}
    assert svc.MoverConta(b["id"], 'down', cadastros["alfa"]) == {}

    with pytest.raises(ValueError):
        svc.MoverConta(a["id"], 'lado', cadastros["alfa"])


def test_alternar_status_e_empresas(db_session, cadastros):
    svc = DreConfigService(db_session)
    conta = svc.SalvarConta(_FormCategoria("Receita", [cadastros["vendas"]]), cadastros["alfa"])

    assert svc.AlternarStatusConta(conta["id"]) is False
    assert svc.AlternarStatusConta(conta["id"]) is True

    assert svc.ListarEmpresasDaConta(conta["id"]) == [cadastros["alfa"]]
    assert svc.AlternarEmpresaConta(conta["id"], cadastros["beta"]) is True
    assert sorted(svc.ListarEmpresasDaConta(conta["id"])) == sorted([cadastros["alfa"], cadastros["beta"]])
    assert svc.AlternarEmpresaConta(conta["id"], cadastros["alfa"]) is False
    assert svc.ListarEmpresasDaConta(conta["id"]) == [cadastros["beta"]]

    modal = svc.ObterConta(conta["id"])
    assert modal["tipo_formulario"] == "category"
    assert modal["empresas"] == [cadastros["beta"]]
