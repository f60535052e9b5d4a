import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from Db.Connections import AtivarChavesEstrangeirasSqlite
from Models.POSTGRESS.Base import Base
from Models.POSTGRESS.Cadastros import Empresa, Categoria, Indicador, UsuarioSistema
import Models.POSTGRESS.DreEstrutura  # noqa: F401
import Models.POSTGRESS.DreModelo  # noqa: F401
from Services.AutenticacaoService import AutenticacaoService
from Settings import TestingConfig


@pytest.fixture(scope="function")
def db_session():
    """Cria uma DB SQLite em memória (FKs validadas) e devolve uma Session limpa por teste."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    AtivarChavesEstrangeirasSqlite(engine)
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine)
    sess = Session()
    try:
        yield sess
    finally:
        sess.close()
        engine.dispose()


@pytest.fixture
def cadastros(db_session):
    """Duas empresas, categorias de receita/despesa e um indicador."""
    alfa = Empresa(id="emp-alfa", name="Alfa Ltda", trading_name="Alfa")
    beta = Empresa(id="emp-beta", name="Beta SA", trading_name="Beta")
    vendas = Categoria(id="cat-vendas", code="3.01", name="Vendas", type="revenue")
    servicos = Categoria(id="cat-servicos", code="3.02", name="Serviços", type="revenue")
    aluguel = Categoria(id="cat-aluguel", code="4.01", name="Aluguel", type="expense")
    headcount = Indicador(id="ind-hc", code="HC", name="Headcount", type="manual")
    db_session.add_all([alfa, beta, vendas, servicos, aluguel, headcount])
    db_session.commit()
    return {
        "alfa": alfa.id,
        "beta": beta.id,
        "vendas": vendas.id,
        "servicos": servicos.id,
        "aluguel": aluguel.id,
        "headcount": headcount.id,
    }


# ============================================================
# APLICAÇÃO FLASK
# ============================================================

@pytest.fixture
def app():
    from App import CriarApp, db

    app = CriarApp(TestingConfig())
    with app.app_context():
        Base.metadata.create_all(db.engine)
    yield app


@pytest.fixture
def app_session(app):
    """Sessão na mesma base da app (para preparar dados dos testes de rota)."""
    sess = app.extensions['dre_sessao']()
    try:
        yield sess
    finally:
        sess.close()


def _Logar(app, app_session, monkeypatch, role, company_id=None, todas_empresas=True):
    app_session.add(UsuarioSistema(
        auth_user_id=f"usuario.{role}",
        name=f"Usuário {role}",
        role=role,
        company_id=company_id,
        has_all_companies_access=todas_empresas,
    ))
    app_session.commit()

    monkeypatch.setattr(AutenticacaoService, "AutenticarNoAd", lambda self, usuario, senha: True)
    client = app.test_client()
    resp = client.post('/Auth/login', json={"username": f"usuario.{role}", "password": "senha"})
    assert resp.status_code == 200
    return client


@pytest.fixture
def client_master(app, app_session, monkeypatch):
    return _Logar(app, app_session, monkeypatch, 'master')


@pytest.fixture
def logar(app, app_session, monkeypatch):
    """Fábrica: logar(role, company_id=None, todas_empresas=True) -> client."""
    def _fabrica(role, company_id=None, todas_empresas=True):
        return _Logar(app, app_session, monkeypatch, role, company_id, todas_empresas)
    return _fabrica
