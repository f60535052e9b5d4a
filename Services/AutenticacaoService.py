from flask_login import UserMixin
from ldap3 import Server, Connection, SIMPLE, core

from Models.POSTGRESS.Cadastros import UsuarioSistema
from Settings import settings
from Utils.Logger import RegistrarLog
from Utils.Security import PermissoesDoPapel


class UsuarioWrapper(UserMixin):
    """
    Classe intermediária que adapta o usuário do banco para o formato
    que o Flask-Login espera. Herda de UserMixin.
    """
    def __init__(self, usuario_db):
        self.id = usuario_db.id
        self.nome = usuario_db.auth_user_id
        self.nome_completo = usuario_db.name or usuario_db.auth_user_id
        self.role = usuario_db.role
        self.company_id = usuario_db.company_id
        self.has_all_companies_access = bool(usuario_db.has_all_companies_access)

        # Permissões derivadas do papel
        self.all_permissions = PermissoesDoPapel(self.role)

    def has_permission(self, slug):
        """
        Verifica se o usuário possui uma permissão específica.
        Admin Master tem acesso irrestrito.
        """
        if 'admin.master' in self.all_permissions:
            return True
        return slug in self.all_permissions

    def ParaDict(self):
        return {
            "id": self.id,
            "login": self.nome,
            "nome": self.nome_completo,
            "role": self.role,
            "company_id": self.company_id,
            "has_all_companies_access": self.has_all_companies_access,
            "permissoes": sorted(self.all_permissions),
        }


class AutenticacaoService:
    """
    Serviço responsável pela autenticação (AD) e pelo carregamento
    do usuário do sistema a partir do banco.
    """

    def __init__(self, session=None, ldap_server=None, ldap_domain=None):
        self.session = session
        # Configurações do AD via Settings (.env)
        self.ldap_server = ldap_server or settings.LDAP_SERVER
        self.ldap_domain = ldap_domain or settings.LDAP_DOMAIN

    def AutenticarNoAd(self, usuario, senha):
        """
        Valida as credenciais no Active Directory.
        Retorna True se sucesso, False caso contrário.
        """
        if not usuario or not senha:
            return False

        full_user = f'{self.ldap_domain}\\{usuario}'

        try:
            server = Server(self.ldap_server, port=389, use_ssl=False, get_info=None)
            # auto_bind=True tenta logar imediatamente
            conn = Connection(server, user=full_user, password=senha, authentication=SIMPLE, auto_bind=True)
            conn.unbind()
            return True

        except core.exceptions.LDAPBindError:
            RegistrarLog(f"Falha de login no AD para '{usuario}' (Credenciais Inválidas)", "AUTH_FAIL")
            return False
        except core.exceptions.LDAPException as e:
            RegistrarLog(f"Erro de conexão LDAP no servidor {self.ldap_server}", "ERROR", erro=e)
            return False

    def ObterUsuarioPorLogin(self, login_usuario):
        """Busca o usuário do sistema pelo login validado no AD."""
        return self.session.query(UsuarioSistema).filter_by(auth_user_id=login_usuario).first()

    def CarregarUsuarioCompleto(self, user_id):
        """
        Carrega o usuário pelo ID.
        Retorna uma instância de UsuarioWrapper (ou None).
        """
        usuario = self.session.get(UsuarioSistema, user_id)
        return UsuarioWrapper(usuario) if usuario else None

    def Autenticar(self, login_usuario, senha):
        """
        Fluxo completo do login: AD e depois cadastro no sistema.
        Credenciais inválidas ou usuário sem cadastro levantam ValueError.
        """
        RegistrarLog(f"Iniciando tentativa de login: Usuário '{login_usuario}'", "AUTH")

        if not self.AutenticarNoAd(login_usuario, senha):
            raise ValueError("Usuário ou senha inválidos.")

        usuario_db = self.ObterUsuarioPorLogin(login_usuario)
        if not usuario_db:
            RegistrarLog(f"Usuário autenticado no AD mas sem cadastro no sistema: {login_usuario}", "WARNING")
            raise ValueError("Login correto (AD), mas usuário não possui cadastro neste sistema.")

        RegistrarLog(f"Login efetuado com sucesso: {login_usuario} (Papel: {usuario_db.role})", "AUTH")
        return UsuarioWrapper(usuario_db)
