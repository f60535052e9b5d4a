import pytest
from sqlalchemy.exc import IntegrityError

from Models.POSTGRESS.Cadastros import Empresa, Categoria, Indicador, DadosBrutos
from Models.POSTGRESS.DreEstrutura import DreConfigConta
from Models.POSTGRESS.DreModelo import ContaDreModelo, EmpresaContaDre
from Services.AutenticacaoService import AutenticacaoService


@pytest.fixture
def base_app(app_session):
    app_session.add_all([
        Empresa(id="emp-alfa", name="Alfa Ltda", trading_name="Alfa"),
        Empresa(id="emp-beta", name="Beta SA", trading_name="Beta"),
        Categoria(id="cat-vendas", code="3.01", name="Vendas", type="revenue"),
        Indicador(id="ind-hc", code="HC", name="Headcount"),
        ContaDreModelo(id="m-receita", nome="Receita", simbolo="+", ordem_padrao=1),
    ])
    app_session.flush()
    app_session.add_all([
        DadosBrutos(empresa_id="emp-alfa", categoria_id="cat-vendas", mes="Março", ano=2024, valor=100),
        DadosBrutos(empresa_id="emp-beta", categoria_id="cat-vendas", mes="Março", ano=2024, valor=30),
    ])
    app_session.commit()


# ============================================================
# AUTENTICAÇÃO
# ============================================================

def test_rotas_exigem_login(app):
    client = app.test_client()
    assert client.get('/DreConfig/api/contas').status_code == 401
    assert client.get('/dashboard').status_code == 401


def test_login_invalido(app, monkeypatch):
    monkeypatch.setattr(AutenticacaoService, "AutenticarNoAd", lambda self, usuario, senha: False)
    resp = app.test_client().post('/Auth/login', json={"username": "fulano", "password": "x"})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Usuário ou senha inválidos."


def test_login_sem_cadastro(app, monkeypatch):
    monkeypatch.setattr(AutenticacaoService, "AutenticarNoAd", lambda self, usuario, senha: True)
    resp = app.test_client().post('/Auth/login', json={"username": "fulano", "password": "x"})
    assert resp.status_code == 401
    assert "não possui cadastro" in resp.get_json()["error"]


def test_dashboard_mostra_menus_do_papel(logar, base_app):
    client = logar('cliente', company_id="emp-alfa", todas_empresas=False)
    dados = client.get('/dashboard').get_json()
    assert dados["usuario"]["role"] == "cliente"
    assert [m["url"] for m in dados["menus"]] == ["/DreVisualizacao"]

    assert client.get('/DreConfig/api/contas').status_code == 403
    assert client.post('/Auth/logout').status_code == 200
    assert client.get('/Auth/me').status_code == 401


# ============================================================
# ESTRUTURA DE CONTAS
# ============================================================

def test_criar_listar_e_excluir_conta(client_master, base_app, app_session):
    resp = client_master.post('/DreConfig/api/contas', json={
        "empresa_id": "emp-alfa",
        "name": "Receita",
        "tipo_formulario": "category",
        "tipo_categoria": "revenue",
        "category_ids": ["cat-vendas"],
    })
    assert resp.status_code == 200
    conta_id = resp.get_json()["conta"]["id"]

    arvore = client_master.get('/DreConfig/api/contas?empresa_id=emp-alfa').get_json()
    assert [l["conta"]["id"] for l in arvore["linhas"]] == [conta_id]

    resp = client_master.delete(f'/DreConfig/api/contas/{conta_id}')
    assert resp.status_code == 200
    assert resp.get_json()["msg"] == "Conta excluída com sucesso!"
    assert app_session.query(DreConfigConta).count() == 0


def test_salvar_conta_sem_empresa_retorna_400(client_master, base_app):
    resp = client_master.post('/DreConfig/api/contas', json={
        "name": "Receita", "tipo_formulario": "category", "category_ids": ["cat-vendas"],
    })
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Selecione uma empresa antes de criar ou editar uma conta"


def test_expandir_pela_query_string(client_master, base_app):
    pai = client_master.post('/DreConfig/api/contas', json={
        "empresa_id": "emp-alfa", "name": "Total", "tipo_formulario": "total", "selected_accounts": ["x"],
    }).get_json()["conta"]
    client_master.post('/DreConfig/api/contas', json={
        "empresa_id": "emp-alfa", "name": "Filho", "tipo_formulario": "flex", "parent_account_id": pai["id"],
    })

    dados = client_master.get(f'/DreConfig/api/contas?empresa_id=emp-alfa&alternar={pai["id"]}').get_json()
    assert dados["expandidos"] == [pai["id"]]
    assert [l["conta"]["name"] for l in dados["linhas"]] == ["Total", "Filho"]


def test_mover_com_direcao_invalida(client_master, base_app):
    conta = client_master.post('/DreConfig/api/contas', json={
        "empresa_id": "emp-alfa", "name": "Flex", "tipo_formulario": "flex",
    }).get_json()["conta"]
    resp = client_master.post(f'/DreConfig/api/contas/{conta["id"]}/mover', json={"direcao": "esquerda"})
    assert resp.status_code == 400


# ============================================================
# MODELO, EMPRESAS E INDICADORES
# ============================================================

def test_modelo_e_componentes(client_master, base_app):
    resp = client_master.post('/DreModelo/api/contas', json={"nome": "Despesas", "simbolo": "-", "ordem_padrao": 2})
    assert resp.get_json()["msg"] == "Conta salva com sucesso!"
    conta_id = resp.get_json()["conta"]["id"]

    resp = client_master.post(f'/DreModelo/api/contas/{conta_id}/componentes', json={
        "referencia_tipo": "categoria", "referencia_id": "cat-vendas",
    })
    assert resp.get_json()["msg"] == "Componente salvo com sucesso!"

    componentes = client_master.get(f'/DreModelo/api/contas/{conta_id}/componentes').get_json()
    assert componentes[0]["referencia_nome"] == "Vendas"

    resp = client_master.post('/DreModelo/api/contas', json={"nome": "X", "tipo": "invalido"})
    assert resp.status_code == 400


def test_copiar_estrutura_entre_empresas(client_master, base_app):
    client_master.post('/EmpresasContasDre/api/emp-alfa/contas/m-receita', json={"marcado": True})

    resp = client_master.post('/EmpresasContasDre/api/copiar', json={"origem_id": "emp-alfa", "destino_id": "emp-beta"})
    assert resp.status_code == 200
    assert resp.get_json()["copiados"] == {"contas": 1, "componentes": 0}

    resumo = client_master.get('/EmpresasContasDre/api/emp-beta/resumo').get_json()
    assert [c["id"] for c in resumo] == ["m-receita"]

    resp = client_master.post('/EmpresasContasDre/api/copiar', json={"origem_id": "emp-alfa", "destino_id": "emp-alfa"})
    assert resp.status_code == 400


def test_indicadores(client_master, base_app):
    resp = client_master.post('/Indicadores/api/indicadores/ind-hc/empresas/emp-alfa')
    assert resp.get_json()["ativo"] is True

    lista = client_master.get('/Indicadores/api/indicadores?empresa_id=emp-alfa&busca=head').get_json()
    assert [i["id"] for i in lista] == ["ind-hc"]

    resp = client_master.delete('/Indicadores/api/indicadores/ind-hc')
    assert resp.status_code == 200
    assert client_master.get('/Indicadores/api/indicadores').get_json() == []


# ============================================================
# VISUALIZAÇÃO
# ============================================================

def test_visualizacao_respeita_empresa_do_usuario(logar, base_app):
    client = logar('cliente', company_id="emp-beta", todas_empresas=False)

    filtros = client.get('/DreVisualizacao/api/filtros').get_json()
    assert [e["id"] for e in filtros["empresas"]] == ["emp-beta"]

    dre = client.get('/DreVisualizacao/api/dre?empresa_id=emp-alfa&mes=Março&ano=2024').get_json()
    assert dre["empresa_id"] == "emp-beta"
    assert dre["linhas"][0]["total"] == 30


def test_visualizacao_mes_invalido(client_master, base_app):
    resp = client_master.get('/DreVisualizacao/api/dre?empresa_id=emp-alfa&mes=Trezembro&ano=2024')
    assert resp.status_code == 400


def test_download_excel(client_master, base_app):
    resp = client_master.get('/DreVisualizacao/api/dre/excel?empresa_id=emp-alfa&mes=3&ano=2024')
    assert resp.status_code == 200
    assert resp.mimetype == 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    assert 'DRE_Mar' in resp.headers['Content-Disposition']


def test_visualizacao_ano_invalido(client_master, base_app):
    resp = client_master.get('/DreVisualizacao/api/dre?empresa_id=emp-alfa&mes=Março&ano=abc')
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Ano inválido."}


def test_excluir_itens_do_modelo_em_uso(client_master, base_app):
    client_master.post('/EmpresasContasDre/api/emp-alfa/contas/m-receita', json={"marcado": True})
    resp = client_master.post('/DreModelo/api/contas/m-receita/componentes', json={"referencia_id": "cat-vendas"})
    componente_id = resp.get_json()["componente"]["id"]
    resp = client_master.post(f'/EmpresasContasDre/api/emp-alfa/componentes/{componente_id}', json={"conta_id": "m-receita"})
    assert resp.status_code == 200

    assert client_master.delete(f'/DreModelo/api/componentes/{componente_id}').status_code == 200
    assert client_master.delete('/DreModelo/api/contas/m-receita').status_code == 200
    assert client_master.get('/EmpresasContasDre/api/emp-alfa/resumo').get_json() == []


def test_banco_de_testes_valida_chaves_estrangeiras(app, app_session):
    app_session.add(EmpresaContaDre(empresa_id="nao-existe", conta_dre_modelo_id="nao-existe"))
    with pytest.raises(IntegrityError):
        app_session.commit()
    app_session.rollback()
