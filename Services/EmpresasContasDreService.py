from collections import defaultdict

from Models.POSTGRESS.Cadastros import Empresa
from Models.POSTGRESS.DreModelo import (
    ContaDreModelo,
    ContaDreSecundaria,
    ContaDreComponente,
    EmpresaContaDre,
    EmpresaComponenteDre,
)
from Utils.Common import parse_int
from Utils.Logger import RegistrarLog


class EmpresasContasDreService:
    """
    Configuração do DRE por empresa:
    - quais contas modelo aparecem e em que ordem
    - quais componentes (por conta ou conta secundária) valem para a empresa
    - cópia completa da configuração de uma empresa para outra
    """

    def __init__(self, session):
        self.session = session

    def _ValidarEmpresa(self, empresa_id):
        if not empresa_id:
            raise ValueError("Selecione uma empresa.")
        if not self.session.get(Empresa, empresa_id):
            raise ValueError("Empresa não encontrada.")

    def _Override(self, empresa_id, conta_id):
        return self.session.query(EmpresaContaDre).filter_by(
            empresa_id=empresa_id, conta_dre_modelo_id=conta_id
        ).first()

    # ============================================================
    # LEITURA
    # ============================================================

    def ListarConfiguracao(self, empresa_id):
        """
        Monta a árvore conta -> contas secundárias -> componentes,
        com a visibilidade/ordem da conta e a marcação de cada componente.
        """
        self._ValidarEmpresa(empresa_id)

        contas = self.session.query(ContaDreModelo).order_by(ContaDreModelo.ordem_padrao).all()
        secundarias = self.session.query(ContaDreSecundaria).order_by(ContaDreSecundaria.ordem).all()
        componentes = self.session.query(ContaDreComponente).order_by(ContaDreComponente.ordem).all()

        overrides = {
            o.conta_dre_modelo_id: o
            for o in self.session.query(EmpresaContaDre).filter_by(empresa_id=empresa_id)
        }
        selecionados = {
            (s.conta_dre_modelo_id, s.conta_secundaria_id, s.componente_id)
            for s in self.session.query(EmpresaComponenteDre).filter_by(empresa_id=empresa_id)
        }

        # Índices para montagem O(1)
        secundarias_por_conta = defaultdict(list)
        for s in secundarias:
            secundarias_por_conta[s.conta_dre_modelo_id].append(s)

        componentes_por_secundaria = defaultdict(list)
        componentes_diretos = defaultdict(list)
        for c in componentes:
            if c.conta_secundaria_id:
                componentes_por_secundaria[c.conta_secundaria_id].append(c)
            else:
                componentes_diretos[c.conta_dre_modelo_id].append(c)

        arvore = []
        for conta in contas:
            override = overrides.get(conta.id)

            no_secundarias = []
            for sec in secundarias_por_conta.get(conta.id, []):
                no_secundarias.append({
                    **sec.ParaDict(),
                    "componentes": [
                        {**c.ParaDict(), "selecionado": (None, sec.id, c.id) in selecionados}
                        for c in componentes_por_secundaria.get(sec.id, [])
                    ],
                })

            arvore.append({
                **conta.ParaDict(),
                "ativa": bool(override and override.visivel),
                "ordem_empresa": override.ordem if override else 0,
                "contas_secundarias": no_secundarias,
                "componentes": [
                    {**c.ParaDict(), "selecionado": (conta.id, None, c.id) in selecionados}
                    for c in componentes_diretos.get(conta.id, [])
                ],
            })
        return arvore

    def ListarResumo(self, empresa_id):
        """Listagem simples: contas visíveis da empresa na ordem da empresa."""
        self._ValidarEmpresa(empresa_id)
        linhas = self.session.query(ContaDreModelo, EmpresaContaDre).join(
            EmpresaContaDre, EmpresaContaDre.conta_dre_modelo_id == ContaDreModelo.id
        ).filter(
            EmpresaContaDre.empresa_id == empresa_id,
            EmpresaContaDre.visivel.is_(True)
        ).order_by(EmpresaContaDre.ordem, ContaDreModelo.ordem_padrao).all()
        return [{**conta.ParaDict(), "ordem_empresa": ov.ordem} for conta, ov in linhas]

    # ============================================================
    # ESCRITA
    # ============================================================

    def AlternarConta(self, empresa_id, conta_id, marcado):
        """
        Marcar: cria a personalização (ordem padrão da conta) ou reativa.
        Desmarcar: apenas esconde (visivel=False).
        """
        self._ValidarEmpresa(empresa_id)
        conta = self.session.get(ContaDreModelo, conta_id)
        if not conta:
            raise ValueError("Conta não encontrada.")

        override = self._Override(empresa_id, conta_id)
        if marcado:
            if override:
                override.visivel = True
            else:
                self.session.add(EmpresaContaDre(
                    empresa_id=empresa_id,
                    conta_dre_modelo_id=conta_id,
                    ordem=conta.ordem_padrao or 0,
                    visivel=True,
                ))
        elif override:
            override.visivel = False

        self.session.flush()

    def AtualizarOrdem(self, empresa_id, conta_id, ordem):
        override = self._Override(empresa_id, conta_id)
        if not override:
            raise ValueError("Ative a conta para a empresa antes de alterar a ordem.")
        override.ordem = parse_int(ordem)
        self.session.flush()

    def AlternarComponente(self, empresa_id, componente_id, conta_id=None, conta_secundaria_id=None):
        """
        Liga/desliga um componente para a empresa.
        Chave: (empresa, conta OU conta secundária, componente).
        Retorna True se ficou selecionado.
        """
        self._ValidarEmpresa(empresa_id)
        if bool(conta_id) == bool(conta_secundaria_id):
            raise ValueError("Informe a conta ou a conta secundária do componente.")
        if not self.session.get(ContaDreComponente, componente_id):
            raise ValueError("Componente não encontrado.")

        chave = dict(
            empresa_id=empresa_id,
            conta_dre_modelo_id=conta_id or None,
            conta_secundaria_id=conta_secundaria_id or None,
            componente_id=componente_id,
        )
        existente = self.session.query(EmpresaComponenteDre).filter_by(**chave).first()
        if existente:
            self.session.delete(existente)
            self.session.flush()
            return False

        self.session.add(EmpresaComponenteDre(**chave))
        self.session.flush()
        return True

    def CopiarEstrutura(self, origem_id, destino_id):
        """
        Substitui toda a configuração do destino pela da origem.
        Apaga e reinsere na mesma transação (a rota faz um único commit).
        """
        if not origem_id or not destino_id:
            raise ValueError("Selecione as empresas de origem e destino.")
        if origem_id == destino_id:
            raise ValueError("A empresa de origem deve ser diferente da de destino.")
        self._ValidarEmpresa(origem_id)
        self._ValidarEmpresa(destino_id)

        for modelo in (EmpresaComponenteDre, EmpresaContaDre):
            self.session.query(modelo).filter(modelo.empresa_id == destino_id).delete(synchronize_session=False)

        contas_origem = self.session.query(EmpresaContaDre).filter_by(empresa_id=origem_id).all()
        componentes_origem = self.session.query(EmpresaComponenteDre).filter_by(empresa_id=origem_id).all()

        self.session.add_all([
            EmpresaContaDre(
                empresa_id=destino_id,
                conta_dre_modelo_id=o.conta_dre_modelo_id,
                ordem=o.ordem,
                visivel=o.visivel,
            )
            for o in contas_origem
        ])
        self.session.add_all([
            EmpresaComponenteDre(
                empresa_id=destino_id,
                conta_dre_modelo_id=o.conta_dre_modelo_id,
                conta_secundaria_id=o.conta_secundaria_id,
                componente_id=o.componente_id,
            )
            for o in componentes_origem
        ])
        self.session.flush()

        RegistrarLog(
            f"Estrutura copiada de {origem_id} para {destino_id}: "
            f"{len(contas_origem)} conta(s), {len(componentes_origem)} componente(s).",
            "CONFIG"
        )
        return {"contas": len(contas_origem), "componentes": len(componentes_origem)}
