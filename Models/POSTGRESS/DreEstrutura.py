# Models/POSTGRESS/DreEstrutura.py
"""
Modelos ORM para a Estrutura de Contas da DRE (árvore por empresa).
Cada conta pode ter uma conta pai; o vínculo com empresas define
em quais empresas a conta aparece.
"""
from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, JSON, UniqueConstraint

from Models.POSTGRESS.Base import Base, novo_id

TIPOS_CONTA = ('revenue', 'expense', 'total', 'flex', 'calculated')
SINAIS_CONTA = ('positive', 'negative')


class DreConfigConta(Base):
    """
    Conta da estrutura DRE.
    O 'type' define quais referências estão preenchidas:
    - revenue/expense: category_ids
    - calculated: indicator_id
    - total: selected_accounts
    - flex: sign
    """
    __tablename__ = 'dre_config_accounts'

    id = Column(String(36), primary_key=True, default=novo_id)
    code = Column(String(50), nullable=True)
    name = Column(String(200), nullable=False)
    type = Column(String(20), nullable=False)
    sign = Column(String(10), nullable=True)
    parent_account_id = Column(String(36), ForeignKey('dre_config_accounts.id'), nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    # Referências conforme o tipo
    category_ids = Column(JSON, nullable=True)
    indicator_id = Column(String(36), ForeignKey('indicators.id'), nullable=True)
    selected_accounts = Column(JSON, nullable=True)

    def ParaDict(self):
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "type": self.type,
            "sign": self.sign,
            "parent_account_id": self.parent_account_id,
            "display_order": self.display_order,
            "is_active": self.is_active,
            "category_ids": list(self.category_ids or []),
            "indicator_id": self.indicator_id,
            "selected_accounts": list(self.selected_accounts or []),
        }

    def __repr__(self):
        return f"<DreConfigConta(id={self.id}, name='{self.name}', type='{self.type}')>"


class DreConfigContaEmpresa(Base):
    """Vínculo N:N entre Contas da estrutura e Empresas."""
    __tablename__ = 'dre_config_account_companies'
    __table_args__ = (
        UniqueConstraint('account_id', 'company_id', name='uq_account_company'),
    )

    id = Column(String(36), primary_key=True, default=novo_id)
    account_id = Column(String(36), ForeignKey('dre_config_accounts.id'), nullable=False, index=True)
    company_id = Column(String(36), ForeignKey('companies.id'), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<DreConfigContaEmpresa(conta={self.account_id}, empresa={self.company_id})>"
