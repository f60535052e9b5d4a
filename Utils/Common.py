import uuid


def parse_bool(value):
    """Converte strings e outros tipos para booleano de forma segura."""
    if isinstance(value, bool): return value
    if isinstance(value, str): return value.lower() in ('true', '1', 't', 's', 'sim')
    return bool(value)


def parse_int(value, padrao=0):
    """Converte para inteiro; valores vazios ou inválidos viram o padrão."""
    if value is None or value == '':
        return padrao
    try:
        return int(value)
    except (TypeError, ValueError):
        return padrao


def novo_id():
    """Gera um identificador UUID (texto) para novas linhas."""
    return str(uuid.uuid4())
