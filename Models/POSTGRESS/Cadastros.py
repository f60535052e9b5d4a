# Models/POSTGRESS/Cadastros.py
"""
Cadastros básicos consumidos pelas telas do DRE:
empresas, categorias, indicadores, dados brutos e usuários do sistema.
"""
from sqlalchemy import Column, String, Boolean, Integer, Float, ForeignKey, UniqueConstraint

from Models.POSTGRESS.Base import Base, novo_id


class Empresa(Base):
    __tablename__ = 'companies'

    id = Column(String(36), primary_key=True, default=novo_id)
    name = Column(String(200), nullable=False)
    trading_name = Column(String(200), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    def ParaDict(self):
        return {"id": self.id, "name": self.name, "trading_name": self.trading_name, "is_active": self.is_active}

    def __repr__(self):
        return f"<Empresa(id={self.id}, trading_name='{self.trading_name}')>"


class Categoria(Base):
    """Categoria do plano (receita ou despesa)."""
    __tablename__ = 'categories'

    id = Column(String(36), primary_key=True, default=novo_id)
    code = Column(String(50), nullable=False)
    name = Column(String(200), nullable=False)
    type = Column(String(20), nullable=False)  # 'revenue' | 'expense'

    def ParaDict(self):
        return {"id": self.id, "code": self.code, "name": self.name, "type": self.type}

    def __repr__(self):
        return f"<Categoria(code='{self.code}', type='{self.type}')>"


class Indicador(Base):
    """
    Indicadores manuais (valor lançado) ou calculados
    (operação sobre categorias ou outros indicadores).
    """
    __tablename__ = 'indicators'

    id = Column(String(36), primary_key=True, default=novo_id)
    code = Column(String(50), nullable=False, unique=True)
    name = Column(String(200), nullable=False)
    type = Column(String(20), nullable=False, default='manual')  # 'manual' | 'calculated'
    operation = Column(String(20), nullable=True)  # sum | subtract | multiply | divide
    calculation_basis = Column(String(20), nullable=True)  # category | indicator

    def ParaDict(self):
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "type": self.type,
            "operation": self.operation,
            "calculation_basis": self.calculation_basis,
        }

    def __repr__(self):
        return f"<Indicador(code='{self.code}', type='{self.type}')>"


class EmpresaIndicador(Base):
    """Ativação de um indicador para uma empresa."""
    __tablename__ = 'company_indicators'
    __table_args__ = (
        UniqueConstraint('company_id', 'indicator_id', name='uq_company_indicator'),
    )

    id = Column(String(36), primary_key=True, default=novo_id)
    company_id = Column(String(36), ForeignKey('companies.id'), nullable=False)
    indicator_id = Column(String(36), ForeignKey('indicators.id'), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    def ParaDict(self):
        return {"id": self.id, "company_id": self.company_id, "indicator_id": self.indicator_id, "is_active": self.is_active}


class DadosBrutos(Base):
    """
    Lançamento bruto por empresa/período.
    Vem de uma categoria (receita/despesa) ou de um indicador.
    """
    __tablename__ = 'dados_brutos'

    id = Column(String(36), primary_key=True, default=novo_id)
    empresa_id = Column(String(36), ForeignKey('companies.id'), nullable=False, index=True)
    categoria_id = Column(String(36), ForeignKey('categories.id'), nullable=True)
    indicador_id = Column(String(36), ForeignKey('indicators.id'), nullable=True)
    mes = Column(String(20), nullable=False)  # Nome do mês ('Janeiro', 'Fevereiro'...)
    ano = Column(Integer, nullable=False)
    valor = Column(Float, nullable=False, default=0)

    def __repr__(self):
        return f"<DadosBrutos(empresa={self.empresa_id}, {self.mes}/{self.ano}, valor={self.valor})>"


class UsuarioSistema(Base):
    """
    Extensão do usuário autenticado: papel e escopo de empresas.
    auth_user_id guarda o login validado no AD.
    """
    __tablename__ = 'system_users'

    id = Column(String(36), primary_key=True, default=novo_id)
    auth_user_id = Column(String(100), nullable=False, unique=True)
    name = Column(String(200), nullable=True)
    role = Column(String(30), nullable=False, default='cliente')  # master | consultor | cliente
    company_id = Column(String(36), ForeignKey('companies.id'), nullable=True)
    has_all_companies_access = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<UsuarioSistema(login='{self.auth_user_id}', role='{self.role}')>"
