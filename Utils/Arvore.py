# Utils/Arvore.py
"""
Utilitários de árvore para a estrutura de contas da DRE.

A árvore é montada UMA vez por leitura (id do pai -> lista de filhos) e o
estado de expansão fica fora dela (um set de ids expandidos), de modo que
a renderização apenas percorre a estrutura pronta.

Todas as funções trabalham com dicionários de conta contendo ao menos
'id', 'parent_account_id' e 'display_order'.
"""
from collections import defaultdict

CHAVE_PAI = 'parent_account_id'
CHAVE_ORDEM = 'display_order'


def _Ordem(conta):
    return conta.get(CHAVE_ORDEM) or 0


def AgruparPorPai(contas):
    """Indexa as contas pelo id do pai (None para as raízes), já ordenadas."""
    filhos_por_pai = defaultdict(list)
    for conta in contas:
        filhos_por_pai[conta.get(CHAVE_PAI)].append(conta)
    for filhos in filhos_por_pai.values():
        filhos.sort(key=_Ordem)
    return filhos_por_pai


def MontarArvore(contas):
    """
    Monta a floresta de contas.

    Returns:
        Lista de nós raiz no formato {'conta': dict, 'filhos': [nós...]}.
        Contas cujo pai não está na lista são tratadas como raiz.
    """
    ids = {c['id'] for c in contas}
    filhos_por_pai = AgruparPorPai(contas)

    def montar_no(conta, visitados):
        # Guarda contra ciclos vindos do banco
        if conta['id'] in visitados:
            return {"conta": conta, "filhos": []}
        visitados = visitados | {conta['id']}
        return {
            "conta": conta,
            "filhos": [montar_no(f, visitados) for f in filhos_por_pai.get(conta['id'], [])],
        }

    raizes = [c for c in contas if not c.get(CHAVE_PAI) or c.get(CHAVE_PAI) not in ids]
    raizes.sort(key=_Ordem)
    return [montar_no(c, frozenset()) for c in raizes]


def AchatarArvoreVisivel(raizes, expandidos, tipo='all'):
    """
    Percorre a árvore em profundidade e devolve as linhas a exibir.

    Args:
        raizes: saída de MontarArvore
        expandidos: set de ids de contas expandidas
        tipo: filtro aplicado às contas raiz ('all' mostra todas)

    Returns:
        Lista de {'conta', 'nivel', 'tem_filhos', 'expandida'}.
    """
    linhas = []

    def visitar(no, nivel):
        conta = no["conta"]
        expandida = conta['id'] in expandidos
        linhas.append({
            "conta": conta,
            "nivel": nivel,
            "tem_filhos": bool(no["filhos"]),
            "expandida": expandida,
        })
        if expandida:
            for filho in no["filhos"]:
                visitar(filho, nivel + 1)

    for no in raizes:
        if tipo == 'all' or no["conta"].get('type') == tipo:
            visitar(no, 0)
    return linhas


def AlternarExpansao(expandidos, conta_id):
    """Retorna um novo set com o id alternado (expande/recolhe)."""
    novo = set(expandidos)
    if conta_id in novo:
        novo.remove(conta_id)
    else:
        novo.add(conta_id)
    return novo


def ColetarDescendentes(contas, conta_id):
    """
    Coleta recursivamente todos os descendentes de uma conta.
    Não inclui a própria conta.
    """
    filhos_por_pai = AgruparPorPai(contas)
    resultado = []
    pendentes = [conta_id]
    vistos = {conta_id}
    while pendentes:
        atual = pendentes.pop()
        for filho in filhos_por_pai.get(atual, []):
            if filho['id'] in vistos:
                continue
            vistos.add(filho['id'])
            resultado.append(filho['id'])
            pendentes.append(filho['id'])
    return resultado


def CalcularTrocaOrdem(contas, conta_id, direcao):
    """
    Calcula a troca de ordem entre irmãos (mesmo pai, ordenados por ordem).

    Args:
        direcao: 'up' ou 'down'

    Returns:
        Dicionário {id: nova_ordem} com as duas contas trocadas,
        ou {} quando não há o que mover (primeira para cima, última para baixo).
    """
    if direcao not in ('up', 'down'):
        raise ValueError("Direção inválida. Use 'up' ou 'down'.")

    conta = next((c for c in contas if c['id'] == conta_id), None)
    if conta is None:
        return {}

    irmaos = sorted(
        (c for c in contas if c.get(CHAVE_PAI) == conta.get(CHAVE_PAI)),
        key=_Ordem,
    )
    idx = next(i for i, c in enumerate(irmaos) if c['id'] == conta_id)

    if direcao == 'up' and idx > 0:
        vizinho = irmaos[idx - 1]
    elif direcao == 'down' and idx < len(irmaos) - 1:
        vizinho = irmaos[idx + 1]
    else:
        return {}

    return {conta['id']: _Ordem(vizinho), vizinho['id']: _Ordem(conta)}


def EhDescendente(contas, possivel_descendente_id, conta_id):
    """True se possivel_descendente_id está na subárvore de conta_id."""
    return possivel_descendente_id in ColetarDescendentes(contas, conta_id)
