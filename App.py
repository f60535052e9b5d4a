from flask import Flask, jsonify, redirect, url_for
from flask_login import LoginManager
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Importa as rotas
from Routes.Auth import auth_bp, CarregarUsuarioFlask
from Routes.Main import main_bp
from Routes.DreConfig import dre_config_bp
from Routes.DreModelo import dre_modelo_bp
from Routes.EmpresasContasDre import empresas_contas_bp
from Routes.Indicadores import indicadores_bp
from Routes.DreVisualizacao import dre_visualizacao_bp

# --- IMPORTS PARA BANCO DE DADOS ---
from Db.Connections import CriarFabricaSessao, check_connections

# Base única de todos os modelos (migrations enxergam todas as tabelas)
from Models.POSTGRESS.Base import Base
import Models.POSTGRESS.Cadastros  # noqa: F401
import Models.POSTGRESS.DreEstrutura  # noqa: F401
import Models.POSTGRESS.DreModelo  # noqa: F401

from Settings import settings
from Utils.Logger import ConfigurarLogger, RegistrarLog

db = SQLAlchemy(metadata=Base.metadata)
migrate = Migrate()
login_manager = LoginManager()


@login_manager.user_loader
def load_user(user_id):
    return CarregarUsuarioFlask(user_id)


@login_manager.unauthorized_handler
def nao_autorizado():
    return jsonify({"error": "Usuário não autenticado."}), 401


def CriarApp(config=None):
    """
    Monta a aplicação Flask para a configuração informada
    (padrão: a do APP_ENV, carregada em Settings).
    """
    config = config or settings
    if isinstance(config, type):
        config = config()

    ConfigurarLogger(config)

    app = Flask(__name__)
    app.secret_key = config.SECRET_KEY
    app.config['TESTING'] = config.TESTING

    # --- CONFIGURAÇÃO FLASK-SQLALCHEMY & MIGRATE ---
    app.config['SQLALCHEMY_DATABASE_URI'] = config.get_postgres_uri()
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = config.get_engine_options()
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    db.init_app(app)
    migrate.init_app(app, db)

    # Sessões das rotas usam a mesma engine do Flask-SQLAlchemy
    with app.app_context():
        config.configurar_engine(db.engine)
        app.extensions['dre_sessao'] = CriarFabricaSessao(db.engine)

    # --- Configuração do Flask-Login ---
    login_manager.init_app(app)

    # --- Registro de Blueprints ---
    prefixo = config.ROUTE_PREFIX
    app.register_blueprint(auth_bp, url_prefix=prefixo + '/Auth')
    app.register_blueprint(main_bp, url_prefix=prefixo + '/')
    app.register_blueprint(dre_config_bp, url_prefix=prefixo + '/DreConfig')
    app.register_blueprint(dre_modelo_bp, url_prefix=prefixo + '/DreModelo')
    app.register_blueprint(empresas_contas_bp, url_prefix=prefixo + '/EmpresasContasDre')
    app.register_blueprint(indicadores_bp, url_prefix=prefixo + '/Indicadores')
    app.register_blueprint(dre_visualizacao_bp, url_prefix=prefixo + '/DreVisualizacao')

    @app.route(prefixo + '/')
    def index():
        return redirect(url_for('Main.MenuPrincipal'))

    RegistrarLog("Aplicação iniciada.", "SYSTEM")
    return app


if __name__ == "__main__":
    # Chamamos sem parâmetros. Ele vai ler do .env (DB_CONNECT_LOGS)
    bancos_ok = check_connections()

    if not bancos_ok:
        print("⚠️  [AVISO CRÍTICO] Falha na conexão com Banco de Dados.")

    CriarApp().run(debug=settings.DEBUG, host='0.0.0.0', port=5000)
