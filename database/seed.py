"""
Database seed data.
Initial data population for fresh database installations.
"""

from werkzeug.security import generate_password_hash


def seed_database(db):
    """Insert initial seed data."""

    # 1. Create default users (one per role)
    users_data = [
        ('admin', 'admin@agenda.local', 'admin123', 'Administrador Sistema', 'admin'),
        ('gestor', 'gestor@agenda.local', 'gestor123', 'Gestor de Espaços', 'gestor'),
        ('professor', 'professor@agenda.local', 'professor123', 'Professor Exemplo', 'usuario'),
    ]

    for username, email, password, full_name, role in users_data:
        db.execute('''
            INSERT INTO users (username, email, password_hash, full_name, role, active)
            VALUES (?, ?, ?, ?, ?, 1)
        ''', (username, email, generate_password_hash(password), full_name, role))

    # 2. Create spaces
    spaces_data = [
        ('Laboratório de Informática', 30, 'Laboratório com 30 computadores', 'Projetor, Computadores'),
        ('Auditório', 120, 'Auditório principal', 'Projetor, Som, Microfone'),
        ('Sala de Vídeo', 40, 'Sala multimídia', 'TV, Som'),
    ]

    for name, capacity, description, equipment in spaces_data:
        db.execute('''
            INSERT INTO spaces (name, capacity, description, equipment, active)
            VALUES (?, ?, ?, ?, 1)
        ''', (name, capacity, description, equipment))

    # 3. Default manager handles every seeded space
    gestor_id = db.execute("SELECT id FROM users WHERE username = 'gestor'").fetchone()[0]
    db.execute('''
        INSERT INTO space_managers (user_id, space_id)
        SELECT ?, id FROM spaces
    ''', (gestor_id,))
